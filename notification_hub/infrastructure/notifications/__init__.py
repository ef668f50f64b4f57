"""Realtime notification helpers for the infrastructure layer."""

from .feed import ChangeFeedHub, FeedListener, notification_feed
from .gateway import RepositoryNotificationGateway
from .platform import LoggingNativeNotifier, UnsupportedPushTransport
from .publisher import (
    NotificationPublisher,
    dispatch_notification,
    notification_publisher,
    serialize_notification,
)
from .push_backend import ServerPushBackend, deliver_push
from .webpush import PushDeliveryError, PushGoneError, WebPushDispatcher

__all__ = [
    "ChangeFeedHub",
    "FeedListener",
    "notification_feed",
    "RepositoryNotificationGateway",
    "LoggingNativeNotifier",
    "UnsupportedPushTransport",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
    "ServerPushBackend",
    "deliver_push",
    "PushDeliveryError",
    "PushGoneError",
    "WebPushDispatcher",
]
