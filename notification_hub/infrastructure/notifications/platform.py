"""Platform bindings used when no native notification API is available."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from notification_hub.application.ports import (
    PERMISSION_DEFAULT,
    PERMISSION_GRANTED,
    NativeNotificationOptions,
    PushCapabilities,
)
from notification_hub.domain.entities import PushSubscription

logger = logging.getLogger(__name__)


class LoggedNotificationHandle:
    def __init__(self, tag: str) -> None:
        self.tag = tag
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            logger.debug("Native notification %s closed", self.tag)


class LoggingNativeNotifier:
    """Write native prompts to the log instead of the OS notification area."""

    def __init__(self, *, permission: str = PERMISSION_GRANTED) -> None:
        self._permission = permission

    @property
    def is_supported(self) -> bool:
        return True

    @property
    def permission(self) -> str:
        return self._permission

    async def request_permission(self) -> str:
        if self._permission == PERMISSION_DEFAULT:
            self._permission = PERMISSION_GRANTED
        return self._permission

    def show(self, options: NativeNotificationOptions) -> LoggedNotificationHandle:
        logger.info("[%s] %s: %s", options.tag, options.title, options.body)
        return LoggedNotificationHandle(options.tag)

    def focus_application(self) -> None:
        logger.debug("Focus requested")


class UnsupportedPushTransport:
    """Transport for hosts without a delivery agent or push manager."""

    user_agent: str | None = None

    def capabilities(self) -> PushCapabilities:
        return PushCapabilities()

    async def register_agent(self, script_url: str, *, scope: str) -> None:
        raise RuntimeError("Push delivery agents are not available on this platform")

    async def request_permission(self) -> str:
        return PERMISSION_DEFAULT

    async def subscribe(self, application_server_key: bytes) -> PushSubscription:
        raise RuntimeError("Push subscriptions are not available on this platform")

    async def get_subscription(self) -> PushSubscription | None:
        return None

    async def unsubscribe(self, subscription: PushSubscription) -> bool:
        return True

    def add_message_listener(
        self, callback: Callable[[Mapping[str, Any]], None]
    ) -> Callable[[], None]:
        return lambda: None


__all__ = ["LoggedNotificationHandle", "LoggingNativeNotifier", "UnsupportedPushTransport"]
