"""对外命令模块。

GUI 外壳调用的全部命令都在这里，每个命令的第一个参数都是 AppContext：

- list_conversations: 列出所有会话。
- new_conversation: 新建会话。
- set_conversation_title: 重命名会话并广播 conversation_title_changed。
- get_conversation: 读取单个会话。
- send_message: 在会话中发送一条消息并记录回复。
- greet: 与会话无关的一次性问候调用。

命令失败时抛出 domain.exceptions 中的业务异常，由 dispatcher 转成错误字符串。
模型调用期间从不持有会话存储的锁。
"""

from typing import Any, Dict

from chatdesk_core.api.context import AppContext
from chatdesk_core.api.events import CONVERSATION_TITLE_CHANGED, ConversationTitleChanged
from chatdesk_core.domain.conversation import ConversationId
from chatdesk_core.domain.exceptions import ValidationError
from chatdesk_core.domain.models import ChatMessage, ChatRequest
from chatdesk_core.infrastructure.logging.logger import logger
from chatdesk_core.prompts import build_chat_messages, build_greeting_prompt


def list_conversations(ctx: AppContext) -> Dict[str, Dict[str, Any]]:
    """列出所有会话。

    Returns:
        以会话 ID 字符串为键的字典，每项包含 id, title, history。
    """
    logger.info("list_conversations")
    convs = ctx.store.list_conversations()
    return {str(cid): conv.to_dict() for cid, conv in convs.items()}


def new_conversation(ctx: AppContext) -> Dict[str, Any]:
    logger.info("new_conversation")
    conv = ctx.store.create_conversation()
    logger.info("conversation created", extra={"extra": {"conversation_id": str(conv.id)}})
    return conv.to_dict()


def get_conversation(ctx: AppContext, conversation_id: ConversationId) -> Dict[str, Any]:
    return ctx.store.get_conversation(conversation_id).to_dict()


def set_conversation_title(ctx: AppContext, conversation_id: ConversationId, new_title: str) -> None:
    """重命名会话。

    Raises:
        ConversationNotFoundError: ID 不存在或格式不合法。
        EventDeliveryError: 标题已更新，但有监听器处理事件失败。
    """
    logger.info("set_conversation_title", extra={"extra": {"conversation_id": str(conversation_id)}})
    conv = ctx.store.rename_conversation(conversation_id, new_title)
    # 锁已释放，监听器里可以安全地回调其他命令
    ctx.events.emit(
        CONVERSATION_TITLE_CHANGED,
        ConversationTitleChanged(id=str(conv.id), new_title=conv.title).to_dict(),
    )


def send_message(ctx: AppContext, conversation_id: ConversationId, content: str) -> Dict[str, Any]:
    """在会话中发送一条用户消息，并把用户消息与助手回复一起追加到历史。

    模型调用失败时历史保持不变。
    """
    if not content or not content.strip():
        raise ValidationError(code="VALIDATION_ERROR", message="Message must not be empty")
    conv = ctx.store.get_conversation(conversation_id)
    settings = ctx.settings
    client = ctx.client_factory()
    req = ChatRequest(
        messages=build_chat_messages(conv.history, content, settings.system_prompt),
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    try:
        result = client.chat(req)
    except Exception as e:
        logger.error(f"send_message failed: {e}", extra={"extra": {
            "conversation_id": str(conv.id),
            "provider": getattr(client, "name", None),
        }})
        raise
    reply = ChatMessage(role="assistant", content=result.text, meta={"model": result.model})
    updated, title_changed = ctx.store.append_exchange(
        conv.id,
        [ChatMessage(role="user", content=content), reply],
        auto_title=True,
    )
    if title_changed:
        ctx.events.emit(
            CONVERSATION_TITLE_CHANGED,
            ConversationTitleChanged(id=str(updated.id), new_title=updated.title).to_dict(),
        )
    return updated.to_dict()


def greet(ctx: AppContext, name: str) -> str:
    """用新建的客户端发送固定问候语，原样返回模型回复。不涉及会话存储。"""
    logger.info("greet")
    client = ctx.client_factory()
    prompt = build_greeting_prompt(name, ctx.settings.greeting_template)
    try:
        return client.send_message(prompt)
    except Exception as e:
        logger.error(f"greet failed: {e}", extra={"extra": {"provider": getattr(client, "name", None)}})
        raise
