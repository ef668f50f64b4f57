"""Shared fixtures and fakes for the notification tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("VAPID_PUBLIC_KEY", "BEl62iUYgUivxIkv69yViEuiBIa-Ib9-SkvMeAtA3LFgDzkrxZJjSgSnfckjBJuBkr3qBUYIHBQFLXYp5Nksh8U")

from notification_hub.config import get_settings, reset_settings_cache  # noqa: E402

reset_settings_cache()

from notification_hub.application.ports import (  # noqa: E402
    FEED_SUBSCRIBED,
    PERMISSION_DEFAULT,
    PERMISSION_GRANTED,
    NativeNotificationOptions,
    PushCapabilities,
)
from notification_hub.domain.entities import Notification, PushSubscription  # noqa: E402

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_notification(
    notification_id: str,
    *,
    minutes: int = 0,
    user_id: str = "user-1",
    text: str | None = None,
    **overrides: Any,
) -> Notification:
    """Build a notification created ``minutes`` after a fixed base time."""

    return Notification(
        id=notification_id,
        user_id=user_id,
        text=text if text is not None else f"Notification {notification_id}",
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **overrides,
    )


class FakeGateway:
    def __init__(self) -> None:
        self.records: dict[str, list[Notification]] = {}
        self.fail_fetch = False
        self.fail_mark = False
        self.gate: asyncio.Event | None = None
        self.marked: list[str] = []
        self.marked_all: list[str] = []

    def seed(self, *notifications: Notification) -> None:
        for notification in notifications:
            self.records.setdefault(notification.user_id or "", []).append(notification)

    def _sorted(self, user_id: str) -> list[Notification]:
        return sorted(
            self.records.get(user_id, []), key=lambda n: n.created_at, reverse=True
        )

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_fetch:
            raise ConnectionError("gateway unavailable")

    async def fetch_recent(self, user_id: str, *, limit: int) -> list[Notification]:
        await self._wait()
        return self._sorted(user_id)[:limit]

    async def fetch_all(self, user_id: str) -> list[Notification]:
        await self._wait()
        return self._sorted(user_id)

    async def fetch_page(
        self, user_id: str, *, offset: int, limit: int
    ) -> tuple[list[Notification], int]:
        await self._wait()
        items = self._sorted(user_id)
        return items[offset : offset + limit], len(items)

    async def mark_as_read(self, notification_id: str) -> None:
        await asyncio.sleep(0)
        if self.fail_mark:
            raise ConnectionError("write rejected")
        self.marked.append(notification_id)

    async def mark_all_as_read(self, user_id: str) -> None:
        await asyncio.sleep(0)
        if self.fail_mark:
            raise ConnectionError("write rejected")
        self.marked_all.append(user_id)


class FakeFeedSubscription:
    def __init__(self, feed: "FakeFeed", user_id: str) -> None:
        self.feed = feed
        self.user_id = user_id
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeFeed:
    def __init__(self, *, auto_ack: bool = True) -> None:
        self.auto_ack = auto_ack
        self.subscriptions: list[
            tuple[FakeFeedSubscription, Callable[[Mapping[str, Any]], None], Callable[[str], None]]
        ] = []

    def subscribe(self, user_id, on_record, on_status) -> FakeFeedSubscription:
        subscription = FakeFeedSubscription(self, user_id)
        self.subscriptions.append((subscription, on_record, on_status))
        if self.auto_ack:
            on_status(FEED_SUBSCRIBED)
        return subscription

    @property
    def active(self) -> list[FakeFeedSubscription]:
        return [entry[0] for entry in self.subscriptions if entry[0].active]

    def deliver(self, record: Mapping[str, Any]) -> None:
        for subscription, on_record, _ in list(self.subscriptions):
            if subscription.active:
                on_record(record)

    def status(self, status: str) -> None:
        for subscription, _, on_status in list(self.subscriptions):
            if subscription.active:
                on_status(status)


class FakeHandle:
    def __init__(self, options: NativeNotificationOptions) -> None:
        self.options = options
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeNotifier:
    def __init__(
        self,
        *,
        supported: bool = True,
        permission: str = PERMISSION_GRANTED,
        request_result: str = PERMISSION_GRANTED,
    ) -> None:
        self.supported = supported
        self._permission = permission
        self.request_result = request_result
        self.permission_requests = 0
        self.shown: list[FakeHandle] = []
        self.focus_calls = 0
        self.fail_show = False

    @property
    def is_supported(self) -> bool:
        return self.supported

    @property
    def permission(self) -> str:
        return self._permission

    async def request_permission(self) -> str:
        self.permission_requests += 1
        self._permission = self.request_result
        return self.request_result

    def show(self, options: NativeNotificationOptions) -> FakeHandle:
        if self.fail_show:
            raise RuntimeError("display failed")
        handle = FakeHandle(options)
        self.shown.append(handle)
        return handle

    def focus_application(self) -> None:
        self.focus_calls += 1


class FakePushTransport:
    def __init__(self, *, supported: bool = True) -> None:
        self.user_agent = "pytest-agent"
        self.caps = PushCapabilities(
            delivery_agent=supported, push_manager=supported, notifications=supported
        )
        self.permission = PERMISSION_GRANTED
        self.registered_agents: list[tuple[str, str]] = []
        self.fail_register = False
        self.server_keys: list[bytes] = []
        self.current: PushSubscription | None = None
        self.unsubscribed: list[str] = []
        self.unsubscribe_result = True
        self.listeners: list[Callable[[Mapping[str, Any]], None]] = []

    def capabilities(self) -> PushCapabilities:
        return self.caps

    async def register_agent(self, script_url: str, *, scope: str) -> None:
        if self.fail_register:
            raise RuntimeError("registration failed")
        self.registered_agents.append((script_url, scope))

    async def request_permission(self) -> str:
        return self.permission

    async def subscribe(self, application_server_key: bytes) -> PushSubscription:
        self.server_keys.append(application_server_key)
        self.current = PushSubscription(
            endpoint="https://push.example.test/endpoint/abc",
            keys={"p256dh": "client-key", "auth": "client-auth"},
        )
        return self.current

    async def get_subscription(self) -> PushSubscription | None:
        return self.current

    async def unsubscribe(self, subscription: PushSubscription) -> bool:
        if self.unsubscribe_result:
            self.unsubscribed.append(subscription.endpoint)
            self.current = None
        return self.unsubscribe_result

    def add_message_listener(self, callback):
        self.listeners.append(callback)

        def remove() -> None:
            if callback in self.listeners:
                self.listeners.remove(callback)

        return remove

    def post(self, message: Mapping[str, Any]) -> None:
        for listener in list(self.listeners):
            listener(message)


class FakePushBackend:
    def __init__(self) -> None:
        self.registered: list[tuple[PushSubscription, str | None, str]] = []
        self.deactivated: list[str] = []
        self.sent: list[tuple[str, Mapping[str, Any], str]] = []
        self.fail_register = False
        self.fail_deactivate = False
        self.fail_send = False

    async def register_subscription(self, subscription, *, user_agent, token) -> None:
        if self.fail_register:
            raise ConnectionError("server rejected subscription")
        self.registered.append((subscription, user_agent, token))

    async def deactivate_subscription(self, endpoint: str) -> None:
        if self.fail_deactivate:
            raise ConnectionError("server unavailable")
        self.deactivated.append(endpoint)

    async def send_notification(self, user_id, payload, *, token) -> None:
        if self.fail_send:
            raise ConnectionError("server unavailable")
        self.sent.append((user_id, payload, token))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def push_transport() -> FakePushTransport:
    return FakePushTransport()


@pytest.fixture
def push_backend() -> FakePushBackend:
    return FakePushBackend()


@pytest.fixture
def reset_database():
    """Give the test a clean in-memory database."""

    from notification_hub.infrastructure.database import Base, engine, initialize_database

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(reset_database):
    from notification_hub.infrastructure.database import SessionLocal

    with SessionLocal() as session:
        yield session
