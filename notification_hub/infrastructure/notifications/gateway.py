"""Async notification gateway backed by the SQLAlchemy repository."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

import anyio
from sqlalchemy.orm import Session

from notification_hub.domain.entities import Notification
from notification_hub.infrastructure.database import SessionLocal
from notification_hub.infrastructure.repositories import NotificationRepository

T = TypeVar("T")


class RepositoryNotificationGateway:
    """Run repository calls in a worker thread so the event loop never blocks."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def _call(self, operation: Callable[[NotificationRepository], T]) -> T:
        with self._session_factory() as session:
            return operation(NotificationRepository(session))

    async def _run(self, operation: Callable[[NotificationRepository], T]) -> T:
        return await anyio.to_thread.run_sync(self._call, operation)

    async def fetch_recent(self, user_id: str, *, limit: int) -> Sequence[Notification]:
        return await self._run(lambda repo: repo.list_for_user(user_id, limit=limit))

    async def fetch_all(self, user_id: str) -> Sequence[Notification]:
        return await self._run(lambda repo: repo.list_for_user(user_id, limit=None))

    async def fetch_page(
        self, user_id: str, *, offset: int, limit: int
    ) -> tuple[Sequence[Notification], int]:
        return await self._run(
            lambda repo: repo.list_page(user_id, offset=offset, limit=limit)
        )

    async def mark_as_read(self, notification_id: str) -> None:
        await self._run(lambda repo: repo.mark_as_read(notification_id))

    async def mark_all_as_read(self, user_id: str) -> None:
        await self._run(lambda repo: repo.mark_all_as_read(user_id))


__all__ = ["RepositoryNotificationGateway"]
