import threading
from uuid import UUID, uuid4

import pytest

from chatdesk_core.domain.exceptions import ConversationNotFoundError
from chatdesk_core.domain.models import ChatMessage
from chatdesk_core.infrastructure.storage.memory_store import InMemoryConversationStore, parse_conversation_id


def test_create_and_list():
    store = InMemoryConversationStore()
    ids = [store.create_conversation().id for _ in range(20)]
    assert len(set(ids)) == 20
    convs = store.list_conversations()
    assert set(convs) == set(ids)
    for cid, conv in convs.items():
        assert conv.id == cid
        assert conv.title == ""
        assert conv.history == []
    assert len(store) == 20


def test_default_title():
    store = InMemoryConversationStore(default_title="New chat")
    assert store.create_conversation().title == "New chat"


def test_rename_existing():
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    renamed = store.rename_conversation(str(conv.id), "Trip planning")
    assert renamed.title == "Trip planning"
    listed = store.list_conversations()[conv.id]
    assert listed.title == "Trip planning"
    assert listed.history == []


def test_rename_accepts_uuid_and_empty_title():
    store = InMemoryConversationStore(default_title="x")
    conv = store.create_conversation()
    store.rename_conversation(conv.id, "")
    assert store.get_conversation(conv.id).title == ""


@pytest.mark.parametrize("bad_id", ["not-a-uuid", "", "1234"])
def test_rename_malformed_id(bad_id):
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    before = store.list_conversations()
    with pytest.raises(ConversationNotFoundError) as ei:
        store.rename_conversation(bad_id, "x")
    assert ei.value.code == "CONVERSATION_NOT_FOUND"
    assert store.list_conversations() == before
    assert store.get_conversation(conv.id).title == ""


def test_rename_unknown_id():
    store = InMemoryConversationStore()
    store.create_conversation()
    before = store.list_conversations()
    with pytest.raises(ConversationNotFoundError):
        store.rename_conversation(str(uuid4()), "x")
    assert store.list_conversations() == before


def test_get_unknown():
    store = InMemoryConversationStore()
    with pytest.raises(ConversationNotFoundError):
        store.get_conversation(uuid4())


def test_list_returns_snapshot():
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    snap = store.list_conversations()
    snap[conv.id].title = "mutated"
    snap[conv.id].history.append(ChatMessage(role="user", content="x"))
    fresh = store.get_conversation(conv.id)
    assert fresh.title == ""
    assert fresh.history == []


def test_append_exchange_and_auto_title():
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    msgs = [ChatMessage(role="user", content="hello there"), ChatMessage(role="assistant", content="hi")]
    updated, changed = store.append_exchange(conv.id, msgs, auto_title=True)
    assert changed is True
    assert updated.title == "hello there"
    assert [m.content for m in updated.history] == ["hello there", "hi"]
    updated, changed = store.append_exchange(
        conv.id,
        [ChatMessage(role="user", content="second"), ChatMessage(role="assistant", content="ok")],
        auto_title=True,
    )
    assert changed is False
    assert updated.title == "hello there"
    assert [m.content for m in updated.history] == ["hello there", "hi", "second", "ok"]


def test_append_exchange_keeps_manual_title():
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    store.rename_conversation(conv.id, "Mine")
    updated, changed = store.append_exchange(conv.id, [ChatMessage(role="user", content="q")], auto_title=True)
    assert changed is False
    assert updated.title == "Mine"


def test_parse_conversation_id():
    u = uuid4()
    assert parse_conversation_id(u) is u
    assert parse_conversation_id(str(u)) == u
    assert parse_conversation_id(u.hex) == u
    with pytest.raises(ConversationNotFoundError):
        parse_conversation_id("zzz")


def test_concurrent_create_and_rename():
    store = InMemoryConversationStore()
    created: list[UUID] = []
    created_lock = threading.Lock()

    def creator():
        for _ in range(50):
            cid = store.create_conversation().id
            with created_lock:
                created.append(cid)

    threads = [threading.Thread(target=creator) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(created) == 200
    assert set(store.list_conversations()) == set(created)

    def renamer(prefix):
        for cid in created:
            store.rename_conversation(cid, f"{prefix}-{cid}")

    threads = [threading.Thread(target=renamer, args=(p,)) for p in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    for cid, conv in store.list_conversations().items():
        assert conv.title in (f"a-{cid}", f"b-{cid}")


def test_readers_never_see_half_exchange():
    store = InMemoryConversationStore()
    conv = store.create_conversation()
    stop = threading.Event()
    bad: list[int] = []

    def reader():
        while not stop.is_set():
            for c in store.list_conversations().values():
                if len(c.history) % 2:
                    bad.append(len(c.history))

    readers = [threading.Thread(target=reader) for _ in range(3)]
    for t in readers:
        t.start()
    for i in range(200):
        store.append_exchange(
            conv.id,
            [ChatMessage(role="user", content=str(i)), ChatMessage(role="assistant", content=str(i))],
        )
    stop.set()
    for t in readers:
        t.join()
    assert bad == []
    assert len(store.get_conversation(conv.id).history) == 400
