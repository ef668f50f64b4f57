"""Utility helpers to push inserted notifications onto the change feed."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from notification_hub.domain.entities import Notification

from .feed import ChangeFeedHub, notification_feed

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and hand them to the feed on the loop thread."""

    def __init__(self, hub: ChangeFeedHub) -> None:
        self._hub = hub

    def dispatch(self, notification: Notification) -> None:
        """Publish ``notification`` to its user's feed subscribers."""

        record = self._serialize(notification)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._hub.publish, record)
            except RuntimeError:
                logger.warning(
                    "No event loop available; notification %s not published", notification.id
                )
        else:
            self._hub.publish(record)

    @staticmethod
    def _serialize(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "user_id": notification.user_id,
            "text": notification.text,
            "icon": notification.icon,
            "link": notification.link,
            "read": notification.read,
            "created_at": notification.created_at.isoformat()
            if notification.created_at
            else None,
            "template": notification.template,
            "priority": notification.priority,
            "category": notification.category,
            "metadata": dict(notification.metadata or {}),
            "silent": notification.silent,
            "type": notification.type,
            "action": notification.action,
            "target": notification.target,
            "entity_id": notification.entity_id,
        }


notification_publisher = NotificationPublisher(notification_feed)


def dispatch_notification(notification: Notification) -> None:
    """Public helper that delegates to the shared publisher instance."""

    notification_publisher.dispatch(notification)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the feed record representation for ``notification``."""

    return NotificationPublisher._serialize(notification)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
]
