"""SQLAlchemy model for registered web push subscriptions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from notification_hub.infrastructure.database import Base
from notification_hub.utils import now_in_app_naive_datetime


class PushSubscriptionModel(Base):
    """Database representation for a device's push endpoint."""

    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    endpoint = Column(String(1000), nullable=False, unique=True)
    keys = Column(JSON, nullable=False, default=dict)
    user_agent = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["PushSubscriptionModel"]
