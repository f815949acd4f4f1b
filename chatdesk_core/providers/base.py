"""Provider 抽象接口。

命令层不直接依赖具体厂商的 HTTP 细节，而是依赖此协议；
测试中可以用任何实现了 chat / send_message 的对象替换。
"""

from typing import Protocol

from chatdesk_core.domain.models import ChatRequest, ChatResult


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    - name: Provider 名称，用于日志。
    - chat(req): 执行一次阻塞的对话调用，返回统一的 ChatResult。
    - send_message(prompt): 单条用户消息的便捷调用，返回回复文本。
    """

    name: str

    def chat(self, req: ChatRequest) -> ChatResult:
        ...

    def send_message(self, prompt: str) -> str:
        ...
