"""Domain entities exposed by the application."""

from .connection import ConnectionStatus
from .notification import (
    NOTIFICATION_PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    Notification,
)
from .preferences import NotificationPreferences, QuietHours
from .push_subscription import PushSubscription
from .results import PushResult, ReadUpdateResult
from .search import NotificationHistoryPage, NotificationSearchFilters
from .system_event import DATA_REFRESH_EVENT, MANUAL_REFRESH_EVENT, SystemEvent
from .template import NotificationAction, NotificationTemplate

__all__ = [
    "ConnectionStatus",
    "Notification",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_LOW",
    "PRIORITY_NORMAL",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "NotificationPreferences",
    "QuietHours",
    "PushSubscription",
    "PushResult",
    "ReadUpdateResult",
    "NotificationHistoryPage",
    "NotificationSearchFilters",
    "SystemEvent",
    "DATA_REFRESH_EVENT",
    "MANUAL_REFRESH_EVENT",
    "NotificationAction",
    "NotificationTemplate",
]
