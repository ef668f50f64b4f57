"""Persistence helpers for web push subscriptions."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.models import PushSubscriptionModel
from notification_hub.utils import ensure_app_timezone


class PushSubscriptionRepository:
    """Store one row per push endpoint, reassigning it on re-registration."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_model_by_endpoint(self, endpoint: str) -> PushSubscriptionModel | None:
        return (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.endpoint == endpoint)
            .one_or_none()
        )

    def get_by_endpoint(self, endpoint: str) -> PushSubscription | None:
        model = self._get_model_by_endpoint(endpoint)
        if model is None:
            return None
        return self._to_entity(model)

    def upsert(self, subscription: PushSubscription, *, user_id: str) -> PushSubscription:
        model = self._get_model_by_endpoint(subscription.endpoint)
        if model is None:
            model = PushSubscriptionModel(endpoint=subscription.endpoint)
        model.user_id = user_id
        model.keys = dict(subscription.keys)
        model.user_agent = subscription.user_agent
        model.active = True
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def deactivate(self, endpoint: str) -> PushSubscription:
        model = self._get_model_by_endpoint(endpoint)
        if model is None:
            msg = f"Push subscription for endpoint {endpoint} not found"
            raise ValueError(msg)
        model.active = False
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_active_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        query = (
            self.session.query(PushSubscriptionModel)
            .filter(
                PushSubscriptionModel.user_id == user_id,
                PushSubscriptionModel.active.is_(True),
            )
            .order_by(PushSubscriptionModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def delete(self, endpoint: str) -> None:
        model = self._get_model_by_endpoint(endpoint)
        if model is None:
            return
        self.session.delete(model)
        self.session.commit()

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            endpoint=model.endpoint,
            keys=dict(model.keys or {}),
            user_agent=model.user_agent,
            active=bool(model.active),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["PushSubscriptionRepository"]
