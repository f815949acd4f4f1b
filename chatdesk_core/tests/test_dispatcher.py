import pytest

from chatdesk_core.api.context import AppContext
from chatdesk_core.api.dispatcher import CommandDispatcher
from chatdesk_core.api.events import EventBus
from chatdesk_core.config.settings import Settings
from chatdesk_core.domain.exceptions import NetworkError
from chatdesk_core.infrastructure.storage.memory_store import InMemoryConversationStore


class EchoProvider:
    name = "echo"

    def send_message(self, prompt):
        return f"echo: {prompt}"


class DownProvider:
    name = "down"

    def send_message(self, prompt):
        raise NetworkError(code="NETWORK_ERROR", message="connection refused")


class BuggyProvider:
    name = "buggy"

    def send_message(self, prompt):
        raise RuntimeError("unexpected")


def make_ctx(provider):
    settings = Settings(api_key="sk-test-0123456789", worker_threads=2, _env_file=None)
    return AppContext(
        settings=settings,
        store=InMemoryConversationStore(),
        client_factory=lambda: provider,
        events=EventBus(),
    )


def test_invoke_success():
    with CommandDispatcher(make_ctx(EchoProvider())) as dispatcher:
        outcome = dispatcher.invoke("greet", "Ada").result(timeout=5)
    assert outcome.ok
    assert outcome.value == "echo: Hello from Ada!"


def test_transport_failure_becomes_string():
    ctx = make_ctx(DownProvider())
    with CommandDispatcher(ctx) as dispatcher:
        outcome = dispatcher.invoke("greet", "Ada").result(timeout=5)
    assert not outcome.ok
    assert outcome.error == "connection refused"
    assert outcome.code == "NETWORK_ERROR"
    assert ctx.store.list_conversations() == {}


def test_not_found_becomes_string():
    with CommandDispatcher(make_ctx(EchoProvider())) as dispatcher:
        outcome = dispatcher.run("set_conversation_title", "not-a-uuid", "x")
    assert not outcome.ok
    assert outcome.code == "CONVERSATION_NOT_FOUND"
    assert "not-a-uuid" in outcome.error


def test_unexpected_error_propagates():
    with CommandDispatcher(make_ctx(BuggyProvider())) as dispatcher:
        future = dispatcher.invoke("greet", "Ada")
        with pytest.raises(RuntimeError):
            future.result(timeout=5)


def test_unknown_command():
    with CommandDispatcher(make_ctx(EchoProvider())) as dispatcher:
        with pytest.raises(KeyError):
            dispatcher.invoke("delete_everything")


def test_concurrent_commands():
    ctx = make_ctx(EchoProvider())
    with CommandDispatcher(ctx, max_workers=8) as dispatcher:
        futures = [dispatcher.invoke("new_conversation") for _ in range(40)]
        ids = [f.result(timeout=5).value["id"] for f in futures]
        listed = dispatcher.invoke("list_conversations").result(timeout=5).value
    assert len(set(ids)) == 40
    assert set(listed) == set(ids)
