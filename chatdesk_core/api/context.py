"""应用上下文。

启动时显式构造一次，再传给每个命令；测试里可以注入假的配置、
存储或客户端工厂，而不依赖任何全局状态。
"""

from dataclasses import dataclass, field
from typing import Callable

from chatdesk_core.api.events import EventBus
from chatdesk_core.config.settings import Settings
from chatdesk_core.domain.conversation import ConversationStore
from chatdesk_core.infrastructure.storage.memory_store import InMemoryConversationStore
from chatdesk_core.providers.base import ProviderClient


@dataclass
class AppContext:
    settings: Settings
    store: ConversationStore
    client_factory: Callable[[], ProviderClient]
    events: EventBus = field(default_factory=EventBus)


def build_context(settings: Settings) -> AppContext:
    return AppContext(
        settings=settings,
        store=InMemoryConversationStore(default_title=settings.default_title),
        client_factory=settings.create_client,
    )
