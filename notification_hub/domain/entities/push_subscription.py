"""Domain entity representing a web push subscription."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PushSubscription:
    """Delivery endpoint plus the keys owned by the delivery agent."""

    endpoint: str
    keys: dict[str, str] = field(default_factory=dict)
    user_agent: str | None = None
    active: bool = True
    user_id: str | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the ``PushSubscription.toJSON()`` shape used on the wire."""

        return {"endpoint": self.endpoint, "keys": dict(self.keys)}

    @classmethod
    def from_json(
        cls, data: dict[str, Any], *, user_agent: str | None = None
    ) -> "PushSubscription":
        endpoint = data.get("endpoint")
        if not endpoint:
            raise ValueError("Push subscription endpoint is required")
        keys = data.get("keys") or {}
        return cls(
            endpoint=str(endpoint),
            keys={str(key): str(value) for key, value in keys.items()},
            user_agent=user_agent,
        )


__all__ = ["PushSubscription"]
