"""Connection health tracking for the change-feed subscription."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from notification_hub.application.ports import (
    FEED_CHANNEL_ERROR,
    FEED_SUBSCRIBED,
    FEED_TIMED_OUT,
)
from notification_hub.domain.entities import ConnectionStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[ConnectionStatus], None]

_ERROR_STATUSES = frozenset({FEED_CHANNEL_ERROR, FEED_TIMED_OUT})


class ConnectionHealthMonitor:
    """Reflect the feed lifecycle as ``connected``/``reconnecting``/``disconnected``.

    The monitor never retries by itself; after a transport error it only
    flips the status back to ``reconnecting`` once ``reconnect_delay`` has
    elapsed, signalling that the transport's own retry is in flight.
    """

    def __init__(self, *, reconnect_delay: float = 5.0) -> None:
        self._status = ConnectionStatus.DISCONNECTED
        self._reconnect_delay = reconnect_delay
        self._pending_flip: asyncio.TimerHandle | None = None
        self._listeners: list[StatusListener] = []

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def on_change(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def session_started(self) -> None:
        """Mark the feed subscription as opening."""

        self._cancel_pending_flip()
        self._set_status(ConnectionStatus.RECONNECTING)

    def handle_transport_status(self, status: str) -> None:
        """Apply a status string reported by the feed transport."""

        if status == FEED_SUBSCRIBED:
            self._cancel_pending_flip()
            self._set_status(ConnectionStatus.CONNECTED)
        elif status in _ERROR_STATUSES:
            self.transport_failed()
        else:
            logger.debug("Ignoring feed status %s", status)

    def transport_failed(self) -> None:
        self._set_status(ConnectionStatus.DISCONNECTED)
        self._schedule_reconnecting_flip()

    def reset(self) -> None:
        """Terminal teardown: always ends ``disconnected`` with no pending flip."""

        self._cancel_pending_flip()
        self._set_status(ConnectionStatus.DISCONNECTED)

    def _schedule_reconnecting_flip(self) -> None:
        self._cancel_pending_flip()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; reconnect status flip skipped")
            return
        self._pending_flip = loop.call_later(self._reconnect_delay, self._flip_to_reconnecting)

    def _flip_to_reconnecting(self) -> None:
        self._pending_flip = None
        if self._status is ConnectionStatus.DISCONNECTED:
            self._set_status(ConnectionStatus.RECONNECTING)

    def _cancel_pending_flip(self) -> None:
        if self._pending_flip is not None:
            self._pending_flip.cancel()
            self._pending_flip = None

    def _set_status(self, status: ConnectionStatus) -> None:
        if status is self._status:
            return
        logger.info("Notification feed status %s -> %s", self._status.value, status.value)
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Connection status listener failed")


__all__ = ["ConnectionHealthMonitor", "StatusListener"]
