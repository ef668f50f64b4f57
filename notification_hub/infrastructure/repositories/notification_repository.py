"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from notification_hub.domain.entities import Notification
from notification_hub.infrastructure.models import NotificationModel
from notification_hub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _user_query(self, user_id: str):
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )

    def list_for_user(
        self,
        user_id: str,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self._user_query(user_id)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_page(
        self, user_id: str, *, offset: int, limit: int
    ) -> tuple[Sequence[Notification], int]:
        """Return one page of notifications and the user's total count."""

        total = (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .scalar()
        )
        models = self._user_query(user_id).offset(max(offset, 0)).limit(limit).all()
        return [self._to_entity(model) for model in models], int(total or 0)

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        return self._to_entity(model)

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_id: str, *, user_id: str | None = None) -> Notification:
        model = self.session.get(NotificationModel, notification_id)
        if model is None or (user_id is not None and model.user_id != user_id):
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        model.read = True
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread visible notification of ``user_id`` as read."""

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
                NotificationModel.silent.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return int(updated or 0)

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id:
            model.id = notification.id
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.user_id = notification.user_id
        model.text = notification.text
        model.icon = notification.icon
        model.link = notification.link
        model.read = notification.read
        model.template = notification.template
        model.priority = notification.priority
        model.category = notification.category
        model.metadata_ = dict(notification.metadata or {})
        model.silent = notification.silent
        model.type = notification.type
        model.action = notification.action
        model.target = notification.target
        model.entity_id = notification.entity_id

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            text=model.text or "",
            icon=model.icon or "",
            link=model.link,
            read=bool(model.read),
            created_at=ensure_app_timezone(model.created_at),
            template=model.template,
            priority=model.priority,
            category=model.category,
            metadata=dict(model.metadata_ or {}),
            silent=bool(model.silent),
            type=model.type,
            action=model.action,
            target=model.target,
            entity_id=model.entity_id,
        )


__all__ = ["NotificationRepository"]
