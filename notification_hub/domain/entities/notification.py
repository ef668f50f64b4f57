"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

PRIORITY_LOW: Final[str] = "low"
PRIORITY_NORMAL: Final[str] = "normal"
PRIORITY_HIGH: Final[str] = "high"
PRIORITY_URGENT: Final[str] = "urgent"

NOTIFICATION_PRIORITIES: Final[tuple[str, ...]] = (
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
)


@dataclass
class Notification:
    """Record delivered to a user through the change feed.

    Silent records carry ``action``/``target``/``entity_id`` and are only
    consumed as internal signals; they never reach the visible list.
    """

    id: str
    user_id: str | None
    text: str
    icon: str = ""
    link: str | None = None
    read: bool = False
    created_at: datetime | None = None
    template: str | None = None
    priority: str = PRIORITY_NORMAL
    category: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    silent: bool = False
    type: str | None = None
    action: str | None = None
    target: str | None = None
    entity_id: str | None = None

    @property
    def is_unread(self) -> bool:
        return not self.read and not self.silent


__all__ = [
    "Notification",
    "NOTIFICATION_PRIORITIES",
    "PRIORITY_LOW",
    "PRIORITY_NORMAL",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
]
