"""In-memory notification state for the active session."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone

from notification_hub.application.ports import NotificationGateway
from notification_hub.domain.entities import Notification, ReadUpdateResult

from .classifier import count_unread

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(notification: Notification) -> datetime:
    return notification.created_at or _EPOCH


class NotificationStore:
    """Own the capped visible list, the search cache and read-state mutations.

    The visible list holds the most recent ``limit`` non-silent
    notifications. The history cache holds every notification fetched for
    search; both receive newly classified visible notifications.

    Every fetch remembers the session generation it started in and drops its
    result if the session was torn down or switched meanwhile.
    """

    def __init__(self, gateway: NotificationGateway, *, limit: int = 50) -> None:
        self._gateway = gateway
        self._limit = limit
        self._visible: list[Notification] = []
        self._history: list[Notification] = []
        self._user_id: str | None = None
        self._generation = 0
        self.load_error: str | None = None
        self.search_error: str | None = None
        self.last_error: str | None = None

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def notifications(self) -> list[Notification]:
        return list(self._visible)

    @property
    def history_cache(self) -> list[Notification]:
        return list(self._history)

    @property
    def unread_count(self) -> int:
        return count_unread(self._visible)

    def get(self, notification_id: str) -> Notification | None:
        for notification in self._visible:
            if notification.id == notification_id:
                return notification
        return None

    def bind(self, user_id: str) -> None:
        """Start a new session for ``user_id`` with empty state."""

        self.reset()
        self._user_id = user_id

    def reset(self) -> None:
        """Drop all state and invalidate in-flight fetches."""

        self._generation += 1
        self._user_id = None
        self._visible = []
        self._history = []
        self.load_error = None
        self.search_error = None
        self.last_error = None

    def _is_current(self, generation: int, user_id: str | None) -> bool:
        return generation == self._generation and user_id == self._user_id

    async def load_initial(self, user_id: str) -> bool:
        """Fetch the most recent notifications into the visible list."""

        generation = self._generation
        try:
            records = await self._gateway.fetch_recent(user_id, limit=self._limit)
        except Exception:
            logger.exception("Could not load notifications for user %s", user_id)
            if self._is_current(generation, user_id):
                self.load_error = "Could not load notifications"
            return False

        if not self._is_current(generation, user_id):
            logger.debug("Discarding stale initial load for user %s", user_id)
            return False

        self.load_error = None
        self._visible = self._merge(self._visible, records, limit=self._limit)
        return True

    async def load_all_for_search(self, user_id: str) -> bool:
        """Fetch the complete history into the search cache."""

        generation = self._generation
        try:
            records = await self._gateway.fetch_all(user_id)
        except Exception:
            logger.exception("Could not load notification history for user %s", user_id)
            if self._is_current(generation, user_id):
                self.search_error = "Could not load notification history"
            return False

        if not self._is_current(generation, user_id):
            logger.debug("Discarding stale history load for user %s", user_id)
            return False

        self.search_error = None
        self._history = self._merge(self._history, records, limit=None)
        return True

    def add(self, notification: Notification) -> None:
        """Insert a newly classified visible notification.

        A notification already present (same id) is replaced in place with
        the incoming value.
        """

        if notification.silent:
            logger.warning("Refusing to store silent notification %s", notification.id)
            return
        self._visible = self._upsert(self._visible, notification, limit=self._limit)
        self._history = self._upsert(self._history, notification, limit=None)

    async def mark_as_read(self, notification_id: str) -> ReadUpdateResult:
        """Optimistically mark ``notification_id`` read, rolling back on failure."""

        user_id, generation = self._user_id, self._generation
        inverse = self._apply_read({notification_id: True})

        try:
            await self._gateway.mark_as_read(notification_id)
        except Exception as exc:
            logger.warning("Could not mark notification %s as read: %s", notification_id, exc)
            if self._is_current(generation, user_id):
                self._apply_read(inverse)
                self.last_error = "Could not mark the notification as read"
            return ReadUpdateResult(
                ok=False, notification_ids=(notification_id,), error=str(exc) or repr(exc)
            )

        return ReadUpdateResult(ok=True, notification_ids=(notification_id,))

    async def mark_all_as_read(self) -> ReadUpdateResult:
        """Optimistically mark every unread visible notification as read."""

        user_id, generation = self._user_id, self._generation
        if user_id is None:
            return ReadUpdateResult(ok=True)

        flipped = [notification.id for notification in self._visible if notification.is_unread]
        if not flipped:
            return ReadUpdateResult(ok=True)

        self._apply_read({notification_id: True for notification_id in flipped})

        try:
            await self._gateway.mark_all_as_read(user_id)
        except Exception as exc:
            logger.warning("Could not mark all notifications as read: %s", exc)
            if self._is_current(generation, user_id):
                self._apply_read({notification_id: False for notification_id in flipped})
                self.last_error = "Could not mark notifications as read"
            return ReadUpdateResult(
                ok=False, notification_ids=tuple(flipped), error=str(exc) or repr(exc)
            )

        return ReadUpdateResult(ok=True, notification_ids=tuple(flipped))

    def _apply_read(self, patch: Mapping[str, bool]) -> dict[str, bool]:
        """Apply ``patch`` and return the inverse patch for entries that changed."""

        inverse: dict[str, bool] = {}

        def _patched(items: list[Notification]) -> list[Notification]:
            result = []
            for notification in items:
                target = patch.get(notification.id)
                if target is None or notification.silent or notification.read == target:
                    result.append(notification)
                    continue
                inverse.setdefault(notification.id, notification.read)
                result.append(replace(notification, read=target))
            return result

        self._visible = _patched(self._visible)
        self._history = _patched(self._history)
        return inverse

    @staticmethod
    def _upsert(
        items: list[Notification], notification: Notification, *, limit: int | None
    ) -> list[Notification]:
        for index, existing in enumerate(items):
            if existing.id == notification.id:
                updated = list(items)
                updated[index] = notification
                return updated
        updated = [notification, *items]
        return updated[:limit] if limit is not None else updated

    @staticmethod
    def _merge(
        current: list[Notification],
        records: Iterable[Notification],
        *,
        limit: int | None,
    ) -> list[Notification]:
        """Combine a fetched snapshot with entries already received live.

        Entries already held locally win over the snapshot since they are at
        least as recent (live inserts or optimistic read flips).
        """

        by_id: dict[str, Notification] = {}
        for record in records:
            if record.silent:
                continue
            by_id[record.id] = record
        for notification in current:
            by_id[notification.id] = notification

        merged = sorted(by_id.values(), key=_sort_key, reverse=True)
        return merged[:limit] if limit is not None else merged


__all__ = ["NotificationStore"]
