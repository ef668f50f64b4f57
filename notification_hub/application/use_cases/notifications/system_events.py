"""In-process registry of subscribers interested in silent system events."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any

from notification_hub.domain.entities import MANUAL_REFRESH_EVENT, SystemEvent
from notification_hub.utils import Clock, now_in_app_timezone

logger = logging.getLogger(__name__)

SystemEventCallback = Callable[[SystemEvent], None]


class _Registration:
    """Wrapper giving each subscription its own identity.

    Subscribing the same callable twice yields two registrations, and each
    unsubscribe removes exactly one of them.
    """

    __slots__ = ("callback",)

    def __init__(self, callback: SystemEventCallback) -> None:
        self.callback = callback


class SystemEventRegistry:
    """Fan silent events out to registered callbacks.

    History keeps the most recent events (newest first) for diagnostics; it
    is never replayed to new subscribers.
    """

    def __init__(
        self, *, history_size: int = 50, clock: Clock = now_in_app_timezone
    ) -> None:
        self._clock = clock
        self._registrations: set[_Registration] = set()
        self._history: deque[SystemEvent] = deque(maxlen=history_size)

    @property
    def history(self) -> list[SystemEvent]:
        return list(self._history)

    @property
    def subscriber_count(self) -> int:
        return len(self._registrations)

    def subscribe(self, callback: SystemEventCallback) -> Callable[[], None]:
        """Register ``callback`` and return its idempotent unsubscribe function."""

        registration = _Registration(callback)
        self._registrations.add(registration)

        def unsubscribe() -> None:
            self._registrations.discard(registration)

        return unsubscribe

    def publish(self, event: SystemEvent) -> None:
        """Record ``event`` and deliver it to every current subscriber."""

        self._history.appendleft(event)

        for registration in tuple(self._registrations):
            try:
                registration.callback(event)
            except Exception:
                logger.exception(
                    "System event subscriber failed for %s/%s", event.type, event.target
                )

    def trigger(self, target: str, data: Any = None) -> SystemEvent:
        """Publish a manual refresh event for ``target``."""

        event = SystemEvent(
            type=MANUAL_REFRESH_EVENT,
            action="refresh",
            target=target,
            data=data,
            timestamp=self._clock(),
        )
        self.publish(event)
        return event

    def clear_history(self) -> None:
        self._history.clear()


__all__ = ["SystemEventRegistry", "SystemEventCallback"]
