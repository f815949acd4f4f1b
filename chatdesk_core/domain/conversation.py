import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol, Tuple, Union
from uuid import UUID, uuid4

from .models import ChatMessage

ConversationId = Union[UUID, str]

TITLE_MAX_CHARS = 32


@dataclass
class Conversation:
    id: UUID = field(default_factory=uuid4)
    title: str = ""
    history: List[ChatMessage] = field(default_factory=list)

    def snapshot(self) -> "Conversation":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "title": self.title,
            "history": [m.to_dict() for m in self.history],
        }


def derive_title(messages: Iterable[ChatMessage]) -> str:
    """用第一条非空用户消息生成标题；找不到时返回空串。"""

    for message in messages:
        if message.role != "user":
            continue
        clean = " ".join(message.content.split())
        if clean:
            return clean[:TITLE_MAX_CHARS]
    return ""


class ConversationStore(Protocol):
    def create_conversation(self) -> Conversation:
        ...

    def list_conversations(self) -> Dict[UUID, Conversation]:
        ...

    def get_conversation(self, conversation_id: ConversationId) -> Conversation:
        ...

    def rename_conversation(self, conversation_id: ConversationId, new_title: str) -> Conversation:
        ...

    def append_exchange(
        self,
        conversation_id: ConversationId,
        messages: List[ChatMessage],
        auto_title: bool = False,
    ) -> Tuple[Conversation, bool]:
        ...
