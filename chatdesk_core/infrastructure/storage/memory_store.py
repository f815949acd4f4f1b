from typing import Dict, List, Tuple
from uuid import UUID

from chatdesk_core.domain.conversation import (
    Conversation,
    ConversationId,
    ConversationStore,
    derive_title,
)
from chatdesk_core.domain.exceptions import ConversationNotFoundError
from chatdesk_core.domain.models import ChatMessage
from chatdesk_core.infrastructure.storage.rwlock import ReadWriteLock


def parse_conversation_id(conversation_id: ConversationId) -> UUID:
    """把外部传入的 ID 解析为 UUID；格式不合法时视为不存在。"""

    if isinstance(conversation_id, UUID):
        return conversation_id
    try:
        return UUID(str(conversation_id))
    except ValueError:
        raise ConversationNotFoundError(conversation_id) from None


class InMemoryConversationStore(ConversationStore):
    """进程内会话存储。

    所有会话只保存在内存中，进程退出即丢失。读操作共享读锁，
    写操作独占写锁；对外返回的都是深拷贝，调用方拿不到内部对象。
    """

    def __init__(self, default_title: str = ""):
        self._default_title = default_title
        self._lock = ReadWriteLock()
        self._conversations: Dict[UUID, Conversation] = {}

    def create_conversation(self) -> Conversation:
        conv = Conversation(title=self._default_title)
        with self._lock.write_locked():
            self._conversations[conv.id] = conv
            return conv.snapshot()

    def list_conversations(self) -> Dict[UUID, Conversation]:
        with self._lock.read_locked():
            return {cid: conv.snapshot() for cid, conv in self._conversations.items()}

    def get_conversation(self, conversation_id: ConversationId) -> Conversation:
        cid = parse_conversation_id(conversation_id)
        with self._lock.read_locked():
            return self._lookup(cid).snapshot()

    def rename_conversation(self, conversation_id: ConversationId, new_title: str) -> Conversation:
        cid = parse_conversation_id(conversation_id)
        with self._lock.write_locked():
            conv = self._lookup(cid)
            conv.title = new_title
            return conv.snapshot()

    def append_exchange(
        self,
        conversation_id: ConversationId,
        messages: List[ChatMessage],
        auto_title: bool = False,
    ) -> Tuple[Conversation, bool]:
        """原子地追加一组消息（通常是用户消息 + 助手回复）。

        auto_title 为 True 且当前标题为空时，用第一条用户消息生成标题。
        返回 (会话快照, 标题是否被修改)。
        """

        cid = parse_conversation_id(conversation_id)
        with self._lock.write_locked():
            conv = self._lookup(cid)
            conv.history.extend(messages)
            title_changed = False
            if auto_title and not conv.title:
                title = derive_title(conv.history)
                if title:
                    conv.title = title
                    title_changed = True
            return conv.snapshot(), title_changed

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._conversations)

    def _lookup(self, cid: UUID) -> Conversation:
        try:
            return self._conversations[cid]
        except KeyError:
            raise ConversationNotFoundError(cid) from None
