"""Use cases for the server-side push subscription registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.notifications.push_backend import (
    PushDispatcher,
    deliver_push,
)
from notification_hub.infrastructure.repositories import PushSubscriptionRepository


def register_push_subscription(
    session: Session, user_id: str, subscription: PushSubscription
) -> PushSubscription:
    """Store ``subscription`` for ``user_id``, reactivating a known endpoint."""

    return PushSubscriptionRepository(session).upsert(subscription, user_id=user_id)


def deactivate_push_subscription(
    session: Session, user_id: str, endpoint: str
) -> PushSubscription:
    repository = PushSubscriptionRepository(session)
    existing = repository.get_by_endpoint(endpoint)
    if existing is None or existing.user_id != user_id:
        msg = f"Push subscription for endpoint {endpoint} not found"
        raise ValueError(msg)
    return repository.deactivate(endpoint)


def send_push_notification(
    session: Session,
    dispatcher: PushDispatcher,
    user_id: str,
    payload: Mapping[str, Any],
) -> int:
    """Push ``payload`` to ``user_id``'s devices and return the delivery count."""

    return deliver_push(session, dispatcher, user_id, payload)


__all__ = [
    "deactivate_push_subscription",
    "register_push_subscription",
    "send_push_notification",
]
