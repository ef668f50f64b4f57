"""Session-scoped context object exposing the notification core to the UI."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

from notification_hub.application.ports import (
    ChangeFeed,
    FeedSubscription,
    NativeNotifier,
    NotificationGateway,
    PushBackend,
    PushTransport,
    SessionTokenProvider,
)
from notification_hub.config import Settings
from notification_hub.domain.entities import (
    ConnectionStatus,
    Notification,
    NotificationHistoryPage,
    NotificationSearchFilters,
    NotificationTemplate,
    PushSubscription,
    ReadUpdateResult,
    SystemEvent,
)
from notification_hub.utils import make_clock, resolve_timezone

from .classifier import classify_record
from .connection import ConnectionHealthMonitor, StatusListener
from .policy import NotificationPolicy, group_notifications, sort_by_priority
from .push import PushState, PushSubscriptionManager
from .realtime_data import RealtimeDataWatcher
from .renderer import NativeNotificationRenderer
from .search import NotificationHistoryService, search_notifications
from .signals import AppSignals
from .store import NotificationStore
from .system_events import SystemEventCallback, SystemEventRegistry
from .templates import TemplateCatalog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NotificationCenter:
    """Wire the notification components for one signed-in user at a time.

    Build a single instance per process and drive it with :meth:`set_user`
    whenever the session user changes. Passing ``None`` tears everything
    down and leaves the center idle.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        gateway: NotificationGateway,
        feed: ChangeFeed,
        notifier: NativeNotifier,
        push_transport: PushTransport,
        push_backend: PushBackend,
        token_provider: SessionTokenProvider,
        signals: AppSignals | None = None,
        templates: TemplateCatalog | None = None,
        policy: NotificationPolicy | None = None,
    ) -> None:
        self.signals = signals or AppSignals()
        self._templates = templates or TemplateCatalog()
        self.policy = policy
        self._feed = feed
        self._tz = resolve_timezone(settings.app_timezone)
        self._clock = make_clock(self._tz)
        self.registry = SystemEventRegistry(
            history_size=settings.system_event_history_size, clock=self._clock
        )
        self.monitor = ConnectionHealthMonitor(reconnect_delay=settings.reconnect_delay_seconds)
        self.store = NotificationStore(gateway, limit=settings.initial_notification_limit)
        self.history_service = NotificationHistoryService(
            gateway, page_size=settings.history_page_size
        )
        self.renderer = NativeNotificationRenderer(
            notifier,
            self._templates,
            self.signals,
            app_name=settings.app_name,
            default_icon=settings.default_icon,
            auto_dismiss_seconds=settings.auto_dismiss_seconds,
            urgent_auto_dismiss_seconds=settings.urgent_auto_dismiss_seconds,
            policy=policy,
        )
        self.push = PushSubscriptionManager(
            push_transport,
            push_backend,
            self.signals,
            token_provider=token_provider,
            vapid_public_key=settings.vapid_public_key,
            service_worker_url=settings.service_worker_url,
        )
        self._user_id: str | None = None
        self._session = 0
        self._subscription: FeedSubscription | None = None
        self._render_tasks: set[asyncio.Task[bool]] = set()

    # -- read-only observables -------------------------------------------

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def notifications(self) -> list[Notification]:
        return self.store.notifications

    @property
    def smart_notifications(self) -> list[Notification]:
        """Visible list grouped by ``(type, entity_id)``, ordered by priority.

        Entries the configured policy would not show are left out.
        """

        ordered = sort_by_priority(group_notifications(self.store.notifications))
        if self.policy is None:
            return ordered
        return [n for n in ordered if self.policy.should_show(n)]

    @property
    def unread_count(self) -> int:
        return self.store.unread_count

    @property
    def connection_status(self) -> ConnectionStatus:
        return self.monitor.status

    @property
    def system_events(self) -> list[SystemEvent]:
        return self.registry.history

    @property
    def templates(self) -> Mapping[str, NotificationTemplate]:
        return self._templates

    @property
    def load_error(self) -> str | None:
        return self.store.load_error

    @property
    def search_error(self) -> str | None:
        return self.store.search_error

    @property
    def is_push_supported(self) -> bool:
        return self.push.is_supported()

    @property
    def push_subscription(self) -> PushSubscription | None:
        return self.push.subscription

    # -- session lifecycle -----------------------------------------------

    async def set_user(self, user_id: str | None) -> None:
        """Tear down the current session and start one for ``user_id``."""

        if user_id == self._user_id and self._subscription is not None:
            return

        self._teardown()
        self._user_id = user_id
        if not user_id:
            return

        session = self._session
        self.store.bind(user_id)
        self.monitor.session_started()
        try:
            self._subscription = self._feed.subscribe(
                user_id,
                lambda record: self._on_record(session, record),
                lambda status: self._on_status(session, status),
            )
        except Exception:
            logger.exception("Could not subscribe to the notification feed for %s", user_id)
            self.monitor.transport_failed()

        await asyncio.gather(
            self.store.load_initial(user_id),
            self.store.load_all_for_search(user_id),
        )

    async def close(self) -> None:
        """End the session and wait for pending native prompts to settle."""

        await self.set_user(None)
        await self.wait_until_idle()

    def _teardown(self) -> None:
        self._session += 1
        if self._subscription is not None:
            try:
                self._subscription.unsubscribe()
            except Exception:
                logger.exception("Could not unsubscribe from the notification feed")
            self._subscription = None
        self.monitor.reset()
        self.store.reset()
        self.registry.clear_history()
        self.renderer.close_all()
        self.push.reset()

    def _on_status(self, session: int, status: str) -> None:
        if session != self._session:
            return
        self.monitor.handle_transport_status(status)

    def _on_record(self, session: int, record: Mapping[str, Any]) -> None:
        if session != self._session:
            logger.debug("Dropping feed record %s from an ended session", record.get("id"))
            return

        item = classify_record(record, clock=self._clock)
        if isinstance(item, SystemEvent):
            self.registry.publish(item)
            return

        self.store.add(item)
        self._schedule_render(item)

    def _schedule_render(self, notification: Notification) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; native prompt for %s skipped", notification.id)
            return
        task = loop.create_task(self.renderer.render(notification))
        self._render_tasks.add(task)
        task.add_done_callback(self._render_tasks.discard)

    async def wait_until_idle(self) -> None:
        """Wait for every scheduled native prompt to finish rendering."""

        while self._render_tasks:
            await asyncio.gather(*tuple(self._render_tasks))

    # -- commands ----------------------------------------------------------

    async def mark_as_read(self, notification_id: str) -> ReadUpdateResult:
        return await self.store.mark_as_read(notification_id)

    async def mark_all_as_read(self) -> ReadUpdateResult:
        return await self.store.mark_all_as_read()

    def on_system_event(self, callback: SystemEventCallback) -> Callable[[], None]:
        return self.registry.subscribe(callback)

    def on_connection_change(self, listener: StatusListener) -> Callable[[], None]:
        return self.monitor.on_change(listener)

    def trigger_refresh(self, target: str, data: Any = None) -> SystemEvent:
        return self.registry.trigger(target, data)

    def watch(
        self, targets: Iterable[str], fetch: Callable[[], Awaitable[T]]
    ) -> RealtimeDataWatcher[T]:
        """Return a data holder refetched whenever ``targets`` change."""

        return RealtimeDataWatcher(self.registry, targets, fetch)

    # -- queries -----------------------------------------------------------

    def search_notifications(
        self, filters: NotificationSearchFilters | None = None, **criteria: Any
    ) -> list[Notification]:
        if filters is None:
            filters = NotificationSearchFilters(**criteria)
        return search_notifications(self.store.history_cache, filters, tz=self._tz)

    async def get_notification_history(
        self, page: int = 1, limit: int | None = None
    ) -> NotificationHistoryPage:
        return await self.history_service.history(self._user_id, page, limit)

    # -- push --------------------------------------------------------------

    async def register_push_notifications(self) -> bool:
        """Initialize the delivery agent and subscribe this device to push."""

        if not await self.push.initialize():
            return False
        self.push.setup_message_listener()
        if self.push.state is PushState.SUBSCRIBED:
            return True
        result = await self.push.subscribe()
        if not result.ok:
            logger.warning("Push registration failed: %s", result.reason)
        return result.ok

    async def unregister_push_notifications(self) -> bool:
        result = await self.push.unsubscribe()
        if not result.ok:
            logger.warning("Push unregistration failed: %s", result.reason)
        return result.ok


__all__ = ["NotificationCenter"]
