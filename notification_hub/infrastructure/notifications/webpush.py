"""Web push delivery through ``pywebpush``."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pywebpush import WebPushException, webpush

from notification_hub.config import Settings, get_settings
from notification_hub.domain.entities import PushSubscription

logger = logging.getLogger(__name__)

PUSH_TTL_SECONDS = 86400


class PushDeliveryError(Exception):
    """Raised when a push message could not be delivered."""


class PushGoneError(PushDeliveryError):
    """Raised when the push service reports the subscription as expired."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"Push subscription is gone: {endpoint}")
        self.endpoint = endpoint


class WebPushDispatcher:
    """Sign and send payloads to a single push endpoint."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._private_key = settings.vapid_private_key
        self._claims = {"sub": settings.vapid_subject}

    def send(self, subscription: PushSubscription, payload: Mapping[str, Any]) -> None:
        if not self._private_key:
            raise PushDeliveryError("VAPID private key is not configured")

        try:
            webpush(
                subscription_info=subscription.to_json(),
                data=json.dumps(dict(payload)),
                vapid_private_key=self._private_key,
                vapid_claims=dict(self._claims),
                ttl=PUSH_TTL_SECONDS,
                headers={"Urgency": "high"},
            )
        except WebPushException as exc:
            response = getattr(exc, "response", None)
            if response is not None and response.status_code in (404, 410):
                raise PushGoneError(subscription.endpoint) from exc
            raise PushDeliveryError(str(exc)) from exc


__all__ = ["PushDeliveryError", "PushGoneError", "WebPushDispatcher"]
