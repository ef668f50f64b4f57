"""Filtering and pagination over the notification log."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone, tzinfo

from notification_hub.application.ports import NotificationGateway
from notification_hub.domain.entities import (
    Notification,
    NotificationHistoryPage,
    NotificationSearchFilters,
)
from notification_hub.utils import ensure_app_timezone

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _matches_query(notification: Notification, query: str) -> bool:
    needle = query.lower()
    for value in (notification.text, notification.type, notification.category):
        if value and needle in value.lower():
            return True
    return False


def _matches(
    notification: Notification, filters: NotificationSearchFilters, tz: tzinfo | None
) -> bool:
    if filters.query and not _matches_query(notification, filters.query):
        return False
    if filters.type and notification.type != filters.type:
        return False
    if filters.category and notification.category != filters.category:
        return False
    if filters.priority and notification.priority != filters.priority:
        return False

    created_at = ensure_app_timezone(notification.created_at, tz)
    if filters.date_from is not None:
        if created_at is None or created_at < ensure_app_timezone(filters.date_from, tz):
            return False
    if filters.date_to is not None:
        if created_at is None or created_at > ensure_app_timezone(filters.date_to, tz):
            return False

    if filters.read is not None and notification.read != filters.read:
        return False
    return True


def search_notifications(
    notifications: Iterable[Notification],
    filters: NotificationSearchFilters,
    *,
    tz: tzinfo | None = None,
) -> list[Notification]:
    """Return the entries of ``notifications`` matching every filter.

    Text search is a case-insensitive substring match over text, type and
    category. The result is always ordered by creation time, newest first,
    and the input is never modified.
    """

    matched = [notification for notification in notifications if _matches(notification, filters, tz)]
    return sorted(
        matched,
        key=lambda notification: ensure_app_timezone(notification.created_at, tz) or _EPOCH,
        reverse=True,
    )


class NotificationHistoryService:
    """Server-paginated browsing of the notification log."""

    def __init__(self, gateway: NotificationGateway, *, page_size: int = 20) -> None:
        self._gateway = gateway
        self._page_size = page_size

    async def history(
        self, user_id: str | None, page: int = 1, page_size: int | None = None
    ) -> NotificationHistoryPage:
        size = page_size or self._page_size
        page = max(page, 1)
        if not user_id:
            return NotificationHistoryPage(page=page, page_size=size)

        offset = (page - 1) * size
        try:
            items, total = await self._gateway.fetch_page(user_id, offset=offset, limit=size)
        except Exception:
            logger.exception("Could not fetch notification history page %s", page)
            return NotificationHistoryPage(
                page=page, page_size=size, error="Could not load notification history"
            )
        return NotificationHistoryPage(
            items=list(items), total=total, page=page, page_size=size
        )


__all__ = ["NotificationHistoryService", "search_notifications"]
