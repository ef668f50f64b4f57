"""Data holders that refetch when a matching system event is published."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Generic, TypeVar

from notification_hub.domain.entities import SystemEvent

from .system_events import SystemEventRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RealtimeDataWatcher(Generic[T]):
    """Keep ``data`` fresh for a set of event targets.

    Any published system event whose ``target`` is one of ``targets``
    schedules a refetch on the running loop. Overlapping refetches are
    collapsed: while one is running, further matching events only mark the
    data dirty and a single follow-up fetch runs afterwards.
    """

    def __init__(
        self,
        registry: SystemEventRegistry,
        targets: Iterable[str],
        fetch: Callable[[], Awaitable[T]],
    ) -> None:
        self._fetch = fetch
        self.targets = frozenset(targets)
        self.data: T | None = None
        self.loading = False
        self.error: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._dirty = False
        self._unsubscribe: Callable[[], None] | None = registry.subscribe(self._on_event)

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    async def refetch(self) -> T | None:
        self.loading = True
        try:
            self.data = await self._fetch()
            self.error = None
        except Exception as exc:
            logger.exception("Realtime refetch for %s failed", sorted(self.targets))
            self.error = str(exc) or exc.__class__.__name__
        finally:
            self.loading = False
        return self.data

    def _on_event(self, event: SystemEvent) -> None:
        if event.target not in self.targets or self.closed:
            return
        logger.debug("System event %s/%s triggers refetch", event.type, event.target)
        if self._task is not None and not self._task.done():
            self._dirty = True
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; refetch for %s skipped", event.target)
            return
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        while True:
            self._dirty = False
            await self.refetch()
            if not self._dirty or self.closed:
                break

    async def wait(self) -> None:
        """Wait for a scheduled refetch, if any, to finish."""

        if self._task is not None:
            await self._task

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None and not self._task.done():
            self._task.cancel()


__all__ = ["RealtimeDataWatcher"]
