"""Per-user change feed for inserted notification rows."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

from notification_hub.application.ports import (
    FEED_CHANNEL_ERROR,
    FEED_SUBSCRIBED,
    FeedRecordCallback,
    FeedStatusCallback,
)

logger = logging.getLogger(__name__)


class FeedListener:
    """In-process subscription returned by :meth:`ChangeFeedHub.subscribe`."""

    def __init__(
        self,
        hub: "ChangeFeedHub",
        user_id: str,
        on_record: FeedRecordCallback,
        on_status: FeedStatusCallback,
    ) -> None:
        self._hub = hub
        self.user_id = user_id
        self.on_record = on_record
        self.on_status = on_status
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._hub._remove_listener(self)


class ChangeFeedHub:
    """Deliver inserted rows to in-process listeners and websocket clients.

    Must be used from the event loop thread; producers running in worker
    threads go through :class:`~.publisher.NotificationPublisher`.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, Set[FeedListener]] = defaultdict(set)
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    def subscribe(
        self,
        user_id: str,
        on_record: FeedRecordCallback,
        on_status: FeedStatusCallback,
    ) -> FeedListener:
        """Register callbacks for ``user_id``; ``SUBSCRIBED`` is reported asynchronously."""

        listener = FeedListener(self, user_id, on_record, on_status)
        self._listeners[user_id].add(listener)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._notify_status(listener, FEED_SUBSCRIBED)
        else:
            loop.call_soon(self._notify_status, listener, FEED_SUBSCRIBED)
        return listener

    def _remove_listener(self, listener: FeedListener) -> None:
        listeners = self._listeners.get(listener.user_id)
        if listeners is None:
            return
        listeners.discard(listener)
        if not listeners:
            self._listeners.pop(listener.user_id, None)

    def listener_count(self, user_id: str) -> int:
        return len(self._listeners.get(user_id, ()))

    def publish(self, record: Mapping[str, Any]) -> None:
        """Deliver ``record`` to every subscriber of its ``user_id``."""

        user_id = record.get("user_id")
        if not user_id:
            logger.warning("Dropping feed record %s without user_id", record.get("id"))
            return
        user_id = str(user_id)

        for listener in tuple(self._listeners.get(user_id, ())):
            if not listener.active:
                continue
            try:
                listener.on_record(dict(record))
            except Exception:
                logger.exception("Feed listener for user %s failed", user_id)

        if self._connections.get(user_id):
            message = {"type": "INSERT", "record": dict(record)}
            asyncio.get_running_loop().create_task(self.send_to_user(user_id, message))

    def fail(self, user_id: str, status: str = FEED_CHANNEL_ERROR) -> None:
        """Report a transport failure to the listeners of ``user_id``."""

        for listener in tuple(self._listeners.get(user_id, ())):
            self._notify_status(listener, status)

    @staticmethod
    def _notify_status(listener: FeedListener, status: str) -> None:
        if not listener.active:
            return
        try:
            listener.on_status(status)
        except Exception:
            logger.exception("Feed status listener for user %s failed", listener.user_id)

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``user_id``."""

        connections = list(self._connections.get(user_id, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:
                logger.info("Dropping dead notification websocket for user %s", user_id)
                self.disconnect(user_id, connection)


notification_feed = ChangeFeedHub()


__all__ = ["ChangeFeedHub", "FeedListener", "notification_feed"]
