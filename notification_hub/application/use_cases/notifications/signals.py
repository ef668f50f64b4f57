"""Application-wide signals consumed by the host UI."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any, DefaultDict, Final

logger = logging.getLogger(__name__)

NAVIGATE: Final[str] = "navigate"
NOTIFICATION_ACTION: Final[str] = "notification-action"
NOTIFICATION_CLOSED: Final[str] = "notification-closed"
OPEN_REJECT_MODAL: Final[str] = "open-reject-modal"

SignalHandler = Callable[[dict[str, Any]], None]


class AppSignals:
    """Named broadcaster; handlers never navigate on their own behalf."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[SignalHandler]] = defaultdict(list)

    def connect(self, name: str, handler: SignalHandler) -> Callable[[], None]:
        self._handlers[name].append(handler)

        def disconnect() -> None:
            handlers = self._handlers.get(name)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return disconnect

    def emit(self, name: str, payload: dict[str, Any] | None = None) -> None:
        detail = dict(payload or {})
        for handler in list(self._handlers.get(name, ())):
            try:
                handler(detail)
            except Exception:
                logger.exception("Signal handler for %s failed", name)

    def navigate(self, link: str, **detail: Any) -> None:
        """Broadcast a navigation intent towards ``link``."""

        self.emit(NAVIGATE, {"link": link, **detail})


__all__ = [
    "AppSignals",
    "NAVIGATE",
    "NOTIFICATION_ACTION",
    "NOTIFICATION_CLOSED",
    "OPEN_REJECT_MODAL",
    "SignalHandler",
]
