"""命令分发。

每个命令在线程池里作为独立任务执行；业务异常被转换成错误字符串，
其他异常记录日志后通过 Future 原样抛出。
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from chatdesk_core.api import service
from chatdesk_core.api.context import AppContext
from chatdesk_core.domain.exceptions import BusinessError
from chatdesk_core.infrastructure.logging.logger import logger

COMMANDS: Dict[str, Callable[..., Any]] = {
    "list_conversations": service.list_conversations,
    "new_conversation": service.new_conversation,
    "get_conversation": service.get_conversation,
    "set_conversation_title": service.set_conversation_title,
    "send_message": service.send_message,
    "greet": service.greet,
}


@dataclass
class CommandOutcome:
    """命令结果：成功时 value 有值，失败时 error 为可展示的错误信息。"""

    value: Any = None
    error: Optional[str] = None
    code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CommandDispatcher:
    def __init__(self, ctx: AppContext, max_workers: Optional[int] = None):
        self._ctx = ctx
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or ctx.settings.worker_threads,
            thread_name_prefix="chatdesk-cmd",
        )

    def run(self, name: str, *args: Any) -> CommandOutcome:
        """在当前线程同步执行命令。"""

        try:
            command = COMMANDS[name]
        except KeyError:
            raise KeyError(f"Unknown command: {name!r}") from None
        try:
            return CommandOutcome(value=command(self._ctx, *args))
        except BusinessError as e:
            logger.warning(f"{name} failed: {e.message}", extra={"extra": {"command": name, "code": e.code}})
            return CommandOutcome(error=e.message, code=e.code)
        except Exception:
            logger.exception(f"{name} crashed")
            raise

    def invoke(self, name: str, *args: Any) -> "Future[CommandOutcome]":
        """提交到线程池异步执行。"""

        if name not in COMMANDS:
            raise KeyError(f"Unknown command: {name!r}")
        return self._executor.submit(self.run, name, *args)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "CommandDispatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
