"""Utility helpers to persist and dispatch notification records."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from notification_hub.domain.entities import (
    DATA_REFRESH_EVENT,
    NOTIFICATION_PRIORITIES,
    PRIORITY_NORMAL,
    Notification,
)
from notification_hub.infrastructure.notifications.publisher import dispatch_notification
from notification_hub.infrastructure.repositories import NotificationRepository
from notification_hub.utils import now_in_app_timezone


def create_notification(
    session: Session,
    user_id: str,
    text: str,
    *,
    type: str = "general",
    priority: str = PRIORITY_NORMAL,
    category: str | None = None,
    template: str | None = None,
    metadata: dict[str, Any] | None = None,
    action: str | None = None,
    target: str | None = None,
    entity_id: str | None = None,
    silent: bool = False,
    link: str | None = None,
    icon: str = "",
) -> Notification:
    """Persist a notification for ``user_id`` and publish it on the change feed."""

    if not user_id:
        raise ValueError("user_id is required")
    if priority not in NOTIFICATION_PRIORITIES:
        raise ValueError(f"Unknown notification priority: {priority}")

    notification = Notification(
        id="",
        user_id=user_id,
        text=text,
        icon=icon,
        link=link,
        read=False,
        created_at=now_in_app_timezone(),
        template=template,
        priority=priority,
        category=category,
        metadata=dict(metadata or {}),
        silent=silent,
        type=type,
        action=action,
        target=target,
        entity_id=entity_id,
    )
    saved = NotificationRepository(session).create(notification)
    dispatch_notification(saved)
    return saved


def emit_system_event(
    session: Session,
    user_id: str,
    *,
    target: str,
    action: str = "refresh",
    type: str = DATA_REFRESH_EVENT,
    entity_id: str | None = None,
) -> Notification:
    """Publish a silent record telling ``user_id``'s session that ``target`` changed."""

    return create_notification(
        session,
        user_id,
        "",
        type=type,
        action=action,
        target=target,
        entity_id=entity_id,
        silent=True,
    )


__all__ = ["create_notification", "emit_system_event"]
