"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text

from notification_hub.infrastructure.database import Base
from notification_hub.utils import now_in_app_naive_datetime


def _new_id() -> str:
    return str(uuid4())


class NotificationModel(Base):
    """Database representation for user notifications and silent events."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    text = Column(Text, nullable=False, default="")
    icon = Column(String(120), nullable=False, default="")
    link = Column(String(500), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    template = Column(String(80), nullable=True)
    priority = Column(String(10), nullable=False, default="normal")
    category = Column(String(80), nullable=True)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    silent = Column(Boolean, nullable=False, default=False)
    type = Column(String(80), nullable=True)
    action = Column(String(80), nullable=True)
    target = Column(String(80), nullable=True)
    entity_id = Column(String(64), nullable=True)


__all__ = ["NotificationModel"]
