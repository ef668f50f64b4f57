"""Server-side registry and dispatch for web push subscriptions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import anyio
from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.database import SessionLocal
from notification_hub.infrastructure.repositories import PushSubscriptionRepository
from notification_hub.infrastructure.security import user_id_from_token

from .webpush import PushDeliveryError, PushGoneError

logger = logging.getLogger(__name__)


class PushDispatcher(Protocol):
    def send(self, subscription: PushSubscription, payload: Mapping[str, Any]) -> None:
        ...


def deliver_push(
    session: Session,
    dispatcher: PushDispatcher,
    user_id: str,
    payload: Mapping[str, Any],
) -> int:
    """Send ``payload`` to every active subscription of ``user_id``.

    Subscriptions reported as gone are deleted. Returns the number of
    successful deliveries.
    """

    repository = PushSubscriptionRepository(session)
    delivered = 0
    for subscription in repository.list_active_for_user(user_id):
        try:
            dispatcher.send(subscription, payload)
        except PushGoneError:
            logger.info("Removing expired push subscription %s", subscription.endpoint[:60])
            repository.delete(subscription.endpoint)
        except PushDeliveryError as exc:
            logger.warning("Push delivery to %s failed: %s", subscription.endpoint[:60], exc)
        else:
            delivered += 1
    return delivered


class ServerPushBackend:
    """Push backend served from this process' database.

    Every call authenticates the session token and runs its database work
    in a worker thread.
    """

    def __init__(
        self,
        dispatcher: PushDispatcher,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        self._dispatcher = dispatcher
        self._session_factory = session_factory

    async def register_subscription(
        self, subscription: PushSubscription, *, user_agent: str | None, token: str
    ) -> None:
        user_id = user_id_from_token(token)
        subscription.user_agent = user_agent

        def _register() -> None:
            with self._session_factory() as session:
                PushSubscriptionRepository(session).upsert(subscription, user_id=user_id)

        await anyio.to_thread.run_sync(_register)

    async def deactivate_subscription(self, endpoint: str) -> None:
        def _deactivate() -> None:
            with self._session_factory() as session:
                PushSubscriptionRepository(session).deactivate(endpoint)

        await anyio.to_thread.run_sync(_deactivate)

    async def send_notification(
        self, user_id: str, payload: Mapping[str, Any], *, token: str
    ) -> None:
        user_id_from_token(token)

        def _send() -> int:
            with self._session_factory() as session:
                return deliver_push(session, self._dispatcher, user_id, payload)

        delivered = await anyio.to_thread.run_sync(_send)
        logger.info("Push payload delivered to %s device(s) of user %s", delivered, user_id)


__all__ = ["PushDispatcher", "ServerPushBackend", "deliver_push"]
