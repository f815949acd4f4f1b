"""ChatDesk 顶层包。

桌面聊天助手的核心实现：配置加载、会话内存存储、
OpenAI 兼容的模型客户端，以及供 GUI 调用的命令层。
"""

from chatdesk_core.api import AppContext, CommandDispatcher, build_context
from chatdesk_core.config.settings import Settings, load_settings

__all__ = ["AppContext", "CommandDispatcher", "Settings", "build_context", "load_settings"]
