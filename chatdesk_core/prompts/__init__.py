"""提示词构造工具。

- build_greeting_prompt: greet 命令使用的固定问候提示词。
- build_chat_messages: 会话对话时发给模型的完整消息列表。
"""

from typing import Iterable, List, Optional

from chatdesk_core.domain.models import ChatMessage

DEFAULT_GREETING_TEMPLATE = "Hello from {name}!"


def build_greeting_prompt(name: str, template: str = DEFAULT_GREETING_TEMPLATE) -> str:
    return template.format(name=name)


def build_chat_messages(
    history: Iterable[ChatMessage],
    user_input: str,
    system_prompt: Optional[str] = None,
) -> List[ChatMessage]:
    """系统提示词（可选）+ 历史消息 + 本轮用户输入。

    历史里的 system 消息会被跳过，系统提示词只以配置为准。
    """

    messages: List[ChatMessage] = []
    if system_prompt:
        messages.append(ChatMessage(role="system", content=system_prompt))
    messages.extend(ChatMessage(role=m.role, content=m.content) for m in history if m.role != "system")
    messages.append(ChatMessage(role="user", content=user_input))
    return messages
