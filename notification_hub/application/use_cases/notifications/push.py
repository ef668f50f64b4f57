"""Lifecycle of the web push subscription for the current session."""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from notification_hub.application.ports import (
    PERMISSION_GRANTED,
    PushBackend,
    PushTransport,
    SessionTokenProvider,
)
from notification_hub.domain.entities import PushResult, PushSubscription

from .signals import NOTIFICATION_ACTION, NOTIFICATION_CLOSED, OPEN_REJECT_MODAL, AppSignals

logger = logging.getLogger(__name__)

MESSAGE_NOTIFICATION_ACTION = "NOTIFICATION_ACTION"
MESSAGE_NOTIFICATION_CLOSED = "NOTIFICATION_CLOSED"


class PushState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"


class PushError(Exception):
    """Base error for push lifecycle failures handled inside the manager."""


class PushNotInitializedError(PushError):
    pass


class PushPermissionDeniedError(PushError):
    pass


class PushConfigurationError(PushError):
    pass


def decode_application_server_key(key: str) -> bytes:
    """Decode a URL-safe base64 VAPID public key, restoring missing padding."""

    padded = key + "=" * (-len(key) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (ValueError, UnicodeEncodeError) as exc:
        raise PushConfigurationError("Invalid VAPID public key") from exc


class PushSubscriptionManager:
    """Own the session's push subscription handle and delivery-agent channel.

    Every public coroutine reports failures as a boolean or a
    :class:`PushResult`; nothing raised by the transport or the backend
    escapes this class.
    """

    def __init__(
        self,
        transport: PushTransport,
        backend: PushBackend,
        signals: AppSignals,
        *,
        token_provider: SessionTokenProvider,
        vapid_public_key: str | None,
        service_worker_url: str = "/sw.js",
        scope: str = "/",
    ) -> None:
        self._transport = transport
        self._backend = backend
        self._signals = signals
        self._token_provider = token_provider
        self._vapid_public_key = vapid_public_key
        self._service_worker_url = service_worker_url
        self._scope = scope
        self._state = PushState.UNINITIALIZED
        self._subscription: PushSubscription | None = None
        self._remove_listener: Callable[[], None] | None = None

    @property
    def state(self) -> PushState:
        return self._state

    @property
    def subscription(self) -> PushSubscription | None:
        return self._subscription

    def is_supported(self) -> bool:
        try:
            return self._transport.capabilities().supported
        except Exception:
            logger.exception("Push capability check failed")
            return False

    async def initialize(self) -> bool:
        """Register the delivery agent. Returns ``False`` when unsupported."""

        if self._state is not PushState.UNINITIALIZED:
            return True
        if not self.is_supported():
            logger.info("Push notifications are not supported on this platform")
            return False

        try:
            await self._transport.register_agent(self._service_worker_url, scope=self._scope)
        except Exception:
            logger.exception("Could not register the push delivery agent")
            return False

        self._state = PushState.INITIALIZED
        logger.info("Push delivery agent registered at %s", self._service_worker_url)
        return True

    async def subscribe(self) -> PushResult:
        """Create a push subscription and register it with the server."""

        try:
            subscription = await self._subscribe()
        except PushError as exc:
            logger.warning("Push subscription aborted: %s", exc)
            return PushResult(ok=False, reason=str(exc))
        except Exception as exc:
            logger.exception("Push subscription failed")
            return PushResult(ok=False, reason=f"Push subscription failed: {exc}")

        self._subscription = subscription
        self._state = PushState.SUBSCRIBED
        return PushResult(ok=True, subscription=subscription)

    async def _subscribe(self) -> PushSubscription:
        if self._state is PushState.UNINITIALIZED:
            raise PushNotInitializedError("Push delivery agent is not initialized")

        permission = await self._transport.request_permission()
        if permission != PERMISSION_GRANTED:
            raise PushPermissionDeniedError("Notification permission was not granted")

        if not self._vapid_public_key:
            raise PushConfigurationError("VAPID public key is not configured")
        server_key = decode_application_server_key(self._vapid_public_key)

        token = self._token_provider()
        if not token:
            raise PushError("No authenticated session")

        subscription = await self._transport.subscribe(server_key)
        subscription.user_agent = subscription.user_agent or self._transport.user_agent
        try:
            await self._backend.register_subscription(
                subscription, user_agent=subscription.user_agent, token=token
            )
        except Exception as exc:
            await self._discard_local(subscription)
            raise PushError(f"Server registration failed: {exc}") from exc

        logger.info("Push subscription registered for %s", subscription.endpoint[:60])
        return subscription

    async def _discard_local(self, subscription: PushSubscription) -> None:
        try:
            await self._transport.unsubscribe(subscription)
        except Exception:
            logger.exception("Could not discard unregistered push subscription")

    async def unsubscribe(self) -> PushResult:
        """Tear down the local subscription, then deactivate it server-side."""

        subscription = self._subscription
        if subscription is None:
            return PushResult(ok=True)

        try:
            removed = await self._transport.unsubscribe(subscription)
        except Exception as exc:
            logger.exception("Push unsubscribe failed")
            return PushResult(ok=False, reason=f"Push unsubscribe failed: {exc}")
        if not removed:
            return PushResult(ok=False, reason="The delivery agent refused to unsubscribe")

        self._subscription = None
        self._state = PushState.UNSUBSCRIBED

        try:
            await self._backend.deactivate_subscription(subscription.endpoint)
        except Exception as exc:
            logger.warning("Push subscription removed locally but not deactivated: %s", exc)
            return PushResult(
                ok=False,
                reason="Subscription removed locally but server deactivation failed",
            )
        return PushResult(ok=True)

    async def get_subscription(self) -> PushSubscription | None:
        if self._state is PushState.UNINITIALIZED:
            return None
        try:
            self._subscription = await self._transport.get_subscription()
        except Exception:
            logger.exception("Could not read the current push subscription")
            return None
        return self._subscription

    async def send_notification(self, user_id: str, payload: Mapping[str, Any]) -> bool:
        """Ask the server to push ``payload`` to ``user_id``'s devices."""

        token = self._token_provider()
        if not token:
            logger.warning("Cannot send push notification without an authenticated session")
            return False
        try:
            await self._backend.send_notification(user_id, payload, token=token)
        except Exception:
            logger.exception("Push dispatch for user %s failed", user_id)
            return False
        return True

    def setup_message_listener(self) -> None:
        """Listen for messages posted back by the delivery agent."""

        if self._remove_listener is not None:
            return
        self._remove_listener = self._transport.add_message_listener(self.handle_message)

    def handle_message(self, message: Mapping[str, Any]) -> None:
        if not isinstance(message, Mapping):
            logger.info("Ignoring malformed delivery agent message %r", message)
            return
        message_type = message.get("type")
        raw_data = message.get("data")
        data = dict(raw_data) if isinstance(raw_data, Mapping) else {}
        if message_type == MESSAGE_NOTIFICATION_ACTION:
            self.handle_notification_action(
                message.get("action") or "", message.get("notificationId"), data
            )
        elif message_type == MESSAGE_NOTIFICATION_CLOSED:
            logger.debug("Push notification closed: %s", data)
            self._signals.emit(NOTIFICATION_CLOSED, data)
        else:
            logger.info("Ignoring delivery agent message %r", message_type)

    def handle_notification_action(
        self, action: str, notification_id: str | None, data: Mapping[str, Any]
    ) -> None:
        data = dict(data) if isinstance(data, Mapping) else {}
        logger.info("Push notification action %s on %s", action, notification_id)
        self._signals.emit(
            NOTIFICATION_ACTION,
            {"action": action, "notification_id": notification_id, "data": data},
        )

        transaction_id = data.get("transactionId")
        if action == "validate" and transaction_id:
            self._signals.navigate(f"/transactions/{transaction_id}/validate")
        elif action == "reject" and transaction_id:
            self._signals.emit(OPEN_REJECT_MODAL, {"transaction_id": transaction_id})
        elif action == "secure":
            self._signals.navigate("/security")
        elif action == "view" and data.get("link"):
            self._signals.navigate(str(data["link"]))

    def reset(self) -> None:
        """Forget the handle owned by the ended session."""

        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        self._subscription = None
        if self._state is not PushState.UNINITIALIZED:
            self._state = PushState.INITIALIZED


__all__ = [
    "PushConfigurationError",
    "PushError",
    "PushNotInitializedError",
    "PushPermissionDeniedError",
    "PushState",
    "PushSubscriptionManager",
    "decode_application_server_key",
]
