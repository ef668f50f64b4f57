from .notification import (
    NotificationHistoryRead,
    NotificationMarkAllReadResponse,
    NotificationRead,
)
from .push import (
    PushSendRequest,
    PushSendResponse,
    PushSubscriptionCreate,
    PushSubscriptionDeactivate,
    PushSubscriptionKeys,
    PushSubscriptionRead,
)

__all__ = [
    "NotificationHistoryRead",
    "NotificationMarkAllReadResponse",
    "NotificationRead",
    "PushSendRequest",
    "PushSendResponse",
    "PushSubscriptionCreate",
    "PushSubscriptionDeactivate",
    "PushSubscriptionKeys",
    "PushSubscriptionRead",
]
