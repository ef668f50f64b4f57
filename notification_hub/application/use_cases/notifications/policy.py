"""Display policy derived from the user's notification preferences."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Final

from notification_hub.domain.entities import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    Notification,
    NotificationPreferences,
)
from notification_hub.utils import now_in_app_timezone

_PRIORITY_WEIGHTS: Final[dict[str, int]] = {
    PRIORITY_URGENT: 4,
    PRIORITY_HIGH: 3,
    PRIORITY_NORMAL: 2,
    PRIORITY_LOW: 1,
}

# seconds before a prompt is shown outside quiet hours
_PRIORITY_DELAYS: Final[dict[str, float]] = {
    PRIORITY_URGENT: 0.0,
    PRIORITY_HIGH: 1.0,
    PRIORITY_NORMAL: 3.0,
    PRIORITY_LOW: 10.0,
}

_MINUTES_PER_DAY: Final[int] = 24 * 60
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_clock(value: str) -> int:
    """Return the minutes after midnight for an ``HH:MM`` string."""

    try:
        hours_text, minutes_text = value.split(":", 1)
        hours, minutes = int(hours_text), int(minutes_text)
    except ValueError as exc:
        raise ValueError(f"Invalid time of day: {value!r}") from exc
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def priority_weight(priority: str | None) -> int:
    return _PRIORITY_WEIGHTS.get(priority or PRIORITY_NORMAL, _PRIORITY_WEIGHTS[PRIORITY_NORMAL])


def sort_by_priority(notifications: Iterable[Notification]) -> list[Notification]:
    """Order by priority weight, then newest first."""

    return sorted(
        notifications,
        key=lambda n: (priority_weight(n.priority), n.created_at or _EPOCH),
        reverse=True,
    )


def group_notifications(notifications: Iterable[Notification]) -> list[Notification]:
    """Collapse notifications sharing ``(type, entity_id)`` into one summary entry.

    The summary reuses the newest member and lists the member ids in its
    metadata. Entries without both keys are never grouped.
    """

    groups: dict[tuple[str, str], list[Notification]] = {}
    result: list[Notification] = []

    for notification in notifications:
        if notification.type and notification.entity_id:
            groups.setdefault((notification.type, notification.entity_id), []).append(
                notification
            )
        else:
            result.append(notification)

    for (type_, entity_id), members in groups.items():
        if len(members) == 1:
            result.append(members[0])
            continue
        latest = max(members, key=lambda n: n.created_at or _EPOCH)
        result.append(
            replace(
                latest,
                id=f"grouped-{type_}-{entity_id}",
                text=f"{len(members)} notifications of type {type_}",
                metadata={
                    **latest.metadata,
                    "grouped": True,
                    "count": len(members),
                    "notifications": [member.id for member in members],
                },
            )
        )

    return sorted(result, key=lambda n: n.created_at or _EPOCH, reverse=True)


class NotificationPolicy:
    """Decide whether and when a visible notification reaches the OS prompt."""

    def __init__(
        self,
        preferences: NotificationPreferences | None = None,
        *,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self.preferences = preferences or NotificationPreferences()
        self._clock = clock

    def _minutes_now(self, now: datetime | None) -> int:
        current = now or self._clock()
        return current.hour * 60 + current.minute

    def is_in_quiet_hours(self, now: datetime | None = None) -> bool:
        quiet = self.preferences.quiet_hours
        if not quiet.enabled:
            return False

        current = self._minutes_now(now)
        start, end = parse_clock(quiet.start), parse_clock(quiet.end)
        if start > end:
            # window crosses midnight
            return current >= start or current <= end
        return start <= current <= end

    def should_show(self, notification: Notification, now: datetime | None = None) -> bool:
        prefs = self.preferences
        if not prefs.enabled:
            return False
        if self.is_in_quiet_hours(now):
            return notification.priority == PRIORITY_URGENT

        kind = notification.type or notification.category
        if kind == "transaction":
            return prefs.transactions
        if kind == "security":
            return prefs.security
        if kind == "system":
            return prefs.system
        if kind == "communication":
            return prefs.messages
        return True

    def recommended_delay(self, notification: Notification, now: datetime | None = None) -> float:
        """Seconds to wait before displaying ``notification``."""

        if self.is_in_quiet_hours(now) and notification.priority != PRIORITY_URGENT:
            end = parse_clock(self.preferences.quiet_hours.end)
            delay_minutes = end - self._minutes_now(now)
            if delay_minutes <= 0:
                delay_minutes += _MINUTES_PER_DAY
            return float(delay_minutes * 60)

        return _PRIORITY_DELAYS.get(notification.priority, _PRIORITY_DELAYS[PRIORITY_NORMAL])


__all__ = [
    "NotificationPolicy",
    "group_notifications",
    "parse_clock",
    "priority_weight",
    "sort_by_priority",
]
