"""Value objects used to query the notification log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .notification import Notification


@dataclass(frozen=True)
class NotificationSearchFilters:
    """Filters combined with AND semantics; ``None`` disables a filter."""

    query: str | None = None
    type: str | None = None
    category: str | None = None
    priority: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    read: bool | None = None


@dataclass
class NotificationHistoryPage:
    """One server-paginated slice of the notification log."""

    items: list[Notification] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    error: str | None = None


__all__ = ["NotificationSearchFilters", "NotificationHistoryPage"]
