"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    text: str
    icon: str = ""
    link: str | None = None
    read: bool = False
    created_at: datetime
    template: str | None = None
    priority: str = "normal"
    category: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    silent: bool = False
    type: str | None = None
    action: str | None = None
    target: str | None = None
    entity_id: str | None = None


class NotificationHistoryRead(BaseModel):
    """One page of the notification log."""

    items: list[NotificationRead]
    total: int
    page: int
    page_size: int


class NotificationMarkAllReadResponse(BaseModel):
    updated: int


__all__ = [
    "NotificationHistoryRead",
    "NotificationMarkAllReadResponse",
    "NotificationRead",
]
