"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 默认配置 (registry)。
- 提供 OpenAI 兼容的具体实现 (chat_client)。
"""

from typing import Optional

from chatdesk_core.providers.base import ProviderClient
from chatdesk_core.providers.chat_client import ChatCompletionsClient
from chatdesk_core.providers.registry import get_provider_config


def create_provider(settings, name: Optional[str] = None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。"""

    provider_name = name or getattr(settings, "provider", "openai")
    return ChatCompletionsClient(settings, get_provider_config(provider_name))
