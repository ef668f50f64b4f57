"""Pydantic models for the push subscription endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PushSubscriptionKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionCreate(BaseModel):
    """Subscription as serialized by the delivery agent, plus its user agent."""

    endpoint: str = Field(..., min_length=1)
    keys: PushSubscriptionKeys
    user_agent: str | None = None


class PushSubscriptionDeactivate(BaseModel):
    endpoint: str = Field(..., min_length=1)


class PushSubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    endpoint: str
    user_agent: str | None = None
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PushSendRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class PushSendResponse(BaseModel):
    delivered: int


__all__ = [
    "PushSendRequest",
    "PushSendResponse",
    "PushSubscriptionCreate",
    "PushSubscriptionDeactivate",
    "PushSubscriptionKeys",
    "PushSubscriptionRead",
]
