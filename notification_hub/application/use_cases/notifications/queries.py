"""Server-side read and read-state use cases for the notification log."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_hub.domain.entities import Notification, NotificationHistoryPage
from notification_hub.infrastructure.repositories import NotificationRepository


def list_recent_notifications(
    session: Session, user_id: str, *, limit: int | None = 50
) -> Sequence[Notification]:
    """Return the newest notifications of ``user_id``; ``limit=None`` returns all."""

    return NotificationRepository(session).list_for_user(user_id, limit=limit)


def get_notification_history(
    session: Session, user_id: str, *, page: int = 1, page_size: int = 20
) -> NotificationHistoryPage:
    page = max(page, 1)
    items, total = NotificationRepository(session).list_page(
        user_id, offset=(page - 1) * page_size, limit=page_size
    )
    return NotificationHistoryPage(
        items=list(items), total=total, page=page, page_size=page_size
    )


def mark_notification_as_read(
    session: Session, user_id: str, notification_id: str
) -> Notification:
    """Mark ``notification_id`` read. Raises ``ValueError`` if it is not the user's."""

    return NotificationRepository(session).mark_as_read(notification_id, user_id=user_id)


def mark_all_notifications_as_read(session: Session, user_id: str) -> int:
    return NotificationRepository(session).mark_all_as_read(user_id)


__all__ = [
    "get_notification_history",
    "list_recent_notifications",
    "mark_all_notifications_as_read",
    "mark_notification_as_read",
]
