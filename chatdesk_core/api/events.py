"""向 GUI 推送的异步事件。"""

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from chatdesk_core.domain.exceptions import EventDeliveryError
from chatdesk_core.infrastructure.logging.logger import logger

CONVERSATION_TITLE_CHANGED = "conversation_title_changed"

Listener = Callable[[Dict[str, Any]], None]


@dataclass(frozen=True)
class ConversationTitleChanged:
    id: str
    new_title: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "new_title": self.new_title}


class EventBus:
    """按事件名分发 payload 给所有监听器。

    监听器在发出事件的线程里被调用（通常是命令线程池），
    GUI 监听器需要自己切回主线程。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """注册监听器，返回取消注册的函数。"""

        with self._lock:
            self._listeners[event].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[event]:
                    self._listeners[event].remove(listener)

        return unsubscribe

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        """通知全部监听器；有监听器失败时，通知完其余监听器后抛出 EventDeliveryError。"""

        with self._lock:
            listeners = list(self._listeners.get(event, ()))
        failures: List[str] = []
        for listener in listeners:
            try:
                listener(dict(payload))
            except Exception as e:
                logger.exception(f"Listener for {event} failed: {e}")
                failures.append(str(e))
        if failures:
            raise EventDeliveryError(
                code="EVENT_DELIVERY_ERROR",
                message=f"Failed to deliver {event}: {'; '.join(failures)}",
                event=event,
            )
