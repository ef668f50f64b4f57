"""Interfaces the notification core expects from its collaborators.

Concrete implementations live in the infrastructure layer; tests bind fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from notification_hub.domain.entities import Notification, PushSubscription

FeedRecordCallback = Callable[[Mapping[str, Any]], None]
FeedStatusCallback = Callable[[str], None]

FEED_SUBSCRIBED = "SUBSCRIBED"
FEED_CHANNEL_ERROR = "CHANNEL_ERROR"
FEED_TIMED_OUT = "TIMED_OUT"
FEED_CLOSED = "CLOSED"

PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"


class NotificationGateway(Protocol):
    """Remote access to the ``notifications`` entity scoped by user."""

    async def fetch_recent(self, user_id: str, *, limit: int) -> Sequence[Notification]:
        ...

    async def fetch_all(self, user_id: str) -> Sequence[Notification]:
        ...

    async def fetch_page(
        self, user_id: str, *, offset: int, limit: int
    ) -> tuple[Sequence[Notification], int]:
        ...

    async def mark_as_read(self, notification_id: str) -> None:
        ...

    async def mark_all_as_read(self, user_id: str) -> None:
        ...


class FeedSubscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class ChangeFeed(Protocol):
    """Insert-subscribe on the ``notifications`` entity filtered by user."""

    def subscribe(
        self,
        user_id: str,
        on_record: FeedRecordCallback,
        on_status: FeedStatusCallback,
    ) -> FeedSubscription:
        ...


@dataclass
class NativeNotificationOptions:
    """Parameters handed to the platform when displaying a prompt."""

    title: str
    body: str
    icon: str
    tag: str
    badge: str | None = None
    require_interaction: bool = False
    silent: bool = False
    vibrate: list[int] = field(default_factory=list)
    actions: list[dict[str, Any]] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    on_click: Callable[[], None] | None = None


class NativeNotificationHandle(Protocol):
    def close(self) -> None:
        ...


class NativeNotifier(Protocol):
    """Platform notification API (permission negotiation and display)."""

    @property
    def is_supported(self) -> bool:
        ...

    @property
    def permission(self) -> str:
        ...

    async def request_permission(self) -> str:
        ...

    def show(self, options: NativeNotificationOptions) -> NativeNotificationHandle:
        ...

    def focus_application(self) -> None:
        ...


@dataclass(frozen=True)
class PushCapabilities:
    delivery_agent: bool = False
    push_manager: bool = False
    notifications: bool = False

    @property
    def supported(self) -> bool:
        return self.delivery_agent and self.push_manager and self.notifications


class PushTransport(Protocol):
    """Delivery agent and push manager primitives of the platform."""

    user_agent: str | None

    def capabilities(self) -> PushCapabilities:
        ...

    async def register_agent(self, script_url: str, *, scope: str) -> None:
        ...

    async def request_permission(self) -> str:
        ...

    async def subscribe(self, application_server_key: bytes) -> PushSubscription:
        ...

    async def get_subscription(self) -> PushSubscription | None:
        ...

    async def unsubscribe(self, subscription: PushSubscription) -> bool:
        ...

    def add_message_listener(
        self, callback: Callable[[Mapping[str, Any]], None]
    ) -> Callable[[], None]:
        ...


class PushBackend(Protocol):
    """Server-side registry and dispatch endpoints for push subscriptions."""

    async def register_subscription(
        self, subscription: PushSubscription, *, user_agent: str | None, token: str
    ) -> None:
        ...

    async def deactivate_subscription(self, endpoint: str) -> None:
        ...

    async def send_notification(
        self, user_id: str, payload: Mapping[str, Any], *, token: str
    ) -> None:
        ...


SessionTokenProvider = Callable[[], str | None]


__all__ = [
    "ChangeFeed",
    "FeedSubscription",
    "FeedRecordCallback",
    "FeedStatusCallback",
    "FEED_SUBSCRIBED",
    "FEED_CHANNEL_ERROR",
    "FEED_TIMED_OUT",
    "FEED_CLOSED",
    "NativeNotificationHandle",
    "NativeNotificationOptions",
    "NativeNotifier",
    "NotificationGateway",
    "PERMISSION_DEFAULT",
    "PERMISSION_DENIED",
    "PERMISSION_GRANTED",
    "PushBackend",
    "PushCapabilities",
    "PushTransport",
    "SessionTokenProvider",
]
