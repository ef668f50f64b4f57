"""Turn raw change-feed records into visible notifications or system events."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from notification_hub.domain.entities import (
    DATA_REFRESH_EVENT,
    NOTIFICATION_PRIORITIES,
    PRIORITY_NORMAL,
    Notification,
    SystemEvent,
)
from notification_hub.utils import Clock, now_in_app_timezone, parse_timestamp

logger = logging.getLogger(__name__)


def is_silent_record(record: Mapping[str, Any]) -> bool:
    """Return whether ``record`` must only be consumed as an internal signal.

    Records without a ``silent`` key are visible.
    """

    if "silent" not in record:
        logger.debug("Feed record %s has no silent flag; treating as visible", record.get("id"))
        return False
    return record.get("silent") is True


def to_system_event(
    record: Mapping[str, Any], *, clock: Clock = now_in_app_timezone
) -> SystemEvent:
    """Build the :class:`SystemEvent` carried by a silent ``record``."""

    entity_id = record.get("entity_id")
    return SystemEvent(
        type=record.get("type") or DATA_REFRESH_EVENT,
        action=record.get("action") or "refresh",
        target=record.get("target") or "unknown",
        data={"entity_id": entity_id} if entity_id else None,
        timestamp=clock(),
    )


def normalize_notification(
    record: Mapping[str, Any], *, clock: Clock = now_in_app_timezone
) -> Notification:
    """Return a :class:`Notification` with defaults filled in."""

    priority = record.get("priority") or PRIORITY_NORMAL
    if priority not in NOTIFICATION_PRIORITIES:
        logger.warning(
            "Unknown priority %r on notification %s; using %s",
            priority,
            record.get("id"),
            PRIORITY_NORMAL,
        )
        priority = PRIORITY_NORMAL

    metadata = record.get("metadata")
    now = clock()
    user_id = record.get("user_id")
    entity_id = record.get("entity_id")
    return Notification(
        id=str(record.get("id")),
        user_id=str(user_id) if user_id is not None else None,
        text=record.get("text") or "",
        icon=record.get("icon") or "",
        link=record.get("link"),
        read=bool(record.get("read", False)),
        created_at=parse_timestamp(record.get("created_at"), now.tzinfo) or now,
        template=record.get("template"),
        priority=priority,
        category=record.get("category"),
        metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        silent=record.get("silent") is True,
        type=record.get("type"),
        action=record.get("action"),
        target=record.get("target"),
        entity_id=str(entity_id) if entity_id is not None else None,
    )


def classify_record(
    record: Mapping[str, Any], *, clock: Clock = now_in_app_timezone
) -> SystemEvent | Notification:
    """Classify a change-feed ``record``.

    Silent records become a :class:`SystemEvent`; anything else is a visible
    :class:`Notification`.
    """

    if is_silent_record(record):
        return to_system_event(record, clock=clock)
    return normalize_notification(record, clock=clock)


def count_unread(notifications: Iterable[Notification]) -> int:
    """Return the number of unread, non-silent entries in ``notifications``."""

    return sum(1 for notification in notifications if notification.is_unread)


__all__ = [
    "classify_record",
    "count_unread",
    "is_silent_record",
    "normalize_notification",
    "to_system_event",
]
