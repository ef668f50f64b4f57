"""Build a notification center bound to this process' infrastructure."""

from __future__ import annotations

from notification_hub.application.ports import (
    NativeNotifier,
    PushTransport,
    SessionTokenProvider,
)
from notification_hub.application.use_cases.notifications import (
    NotificationCenter,
    NotificationPolicy,
)
from notification_hub.config import Settings, get_settings

from .feed import ChangeFeedHub, notification_feed
from .gateway import RepositoryNotificationGateway
from .platform import LoggingNativeNotifier, UnsupportedPushTransport
from .push_backend import ServerPushBackend
from .webpush import WebPushDispatcher


def create_notification_center(
    *,
    token_provider: SessionTokenProvider,
    settings: Settings | None = None,
    feed: ChangeFeedHub | None = None,
    notifier: NativeNotifier | None = None,
    push_transport: PushTransport | None = None,
    policy: NotificationPolicy | None = None,
) -> NotificationCenter:
    settings = settings or get_settings()
    return NotificationCenter(
        settings,
        gateway=RepositoryNotificationGateway(),
        feed=feed or notification_feed,
        notifier=notifier or LoggingNativeNotifier(),
        push_transport=push_transport or UnsupportedPushTransport(),
        push_backend=ServerPushBackend(WebPushDispatcher(settings)),
        token_provider=token_provider,
        policy=policy,
    )


__all__ = ["create_notification_center"]
