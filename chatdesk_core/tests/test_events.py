import pytest

from chatdesk_core.api.events import ConversationTitleChanged, EventBus
from chatdesk_core.domain.exceptions import EventDeliveryError


def test_emit_to_all_listeners():
    bus = EventBus()
    a, b = [], []
    bus.subscribe("evt", a.append)
    bus.subscribe("evt", b.append)
    bus.subscribe("other", lambda p: pytest.fail("wrong event"))
    bus.emit("evt", {"x": 1})
    assert a == [{"x": 1}]
    assert b == [{"x": 1}]


def test_unsubscribe():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe("evt", seen.append)
    unsubscribe()
    unsubscribe()
    bus.emit("evt", {})
    assert seen == []


def test_listener_gets_copy():
    bus = EventBus()

    def mutate(payload):
        payload["x"] = 2

    seen = []
    bus.subscribe("evt", mutate)
    bus.subscribe("evt", seen.append)
    bus.emit("evt", {"x": 1})
    assert seen == [{"x": 1}]


def test_failed_listener_raises_after_delivery():
    bus = EventBus()
    seen = []

    def broken(payload):
        raise ValueError("bad")

    bus.subscribe("evt", broken)
    bus.subscribe("evt", seen.append)
    with pytest.raises(EventDeliveryError) as ei:
        bus.emit("evt", {"x": 1})
    assert ei.value.code == "EVENT_DELIVERY_ERROR"
    assert seen == [{"x": 1}]


def test_title_changed_payload():
    assert ConversationTitleChanged(id="abc", new_title="t").to_dict() == {"id": "abc", "new_title": "t"}
