"""Real-time notification core.

Server-side producers live in :mod:`.events` and :mod:`.queries`; they are
not imported here so the core never pulls in the database layer.
"""

from .center import NotificationCenter
from .classifier import classify_record, count_unread, is_silent_record
from .connection import ConnectionHealthMonitor
from .policy import NotificationPolicy, group_notifications, sort_by_priority
from .push import PushState, PushSubscriptionManager
from .realtime_data import RealtimeDataWatcher
from .renderer import NativeNotificationRenderer
from .search import NotificationHistoryService, search_notifications
from .signals import AppSignals
from .store import NotificationStore
from .system_events import SystemEventRegistry
from .templates import DEFAULT_TEMPLATES, TemplateCatalog

__all__ = [
    "AppSignals",
    "ConnectionHealthMonitor",
    "DEFAULT_TEMPLATES",
    "NativeNotificationRenderer",
    "NotificationCenter",
    "NotificationHistoryService",
    "NotificationPolicy",
    "NotificationStore",
    "PushState",
    "PushSubscriptionManager",
    "RealtimeDataWatcher",
    "SystemEventRegistry",
    "TemplateCatalog",
    "classify_record",
    "count_unread",
    "group_notifications",
    "is_silent_record",
    "search_notifications",
    "sort_by_priority",
]
