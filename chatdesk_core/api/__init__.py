"""命令层：GUI 通过这里访问会话存储与模型客户端。"""

from chatdesk_core.api.context import AppContext, build_context
from chatdesk_core.api.dispatcher import CommandDispatcher, CommandOutcome

__all__ = ["AppContext", "build_context", "CommandDispatcher", "CommandOutcome"]
