"""SQLAlchemy model for persisted notification preferences."""

from sqlalchemy import Boolean, Column, DateTime, String

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationPreferenceModel(Base):
    """Database representation of a user's horoscope notification switches."""

    __tablename__ = "notification_preference"

    user_id = Column(String(64), primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
    daily = Column(Boolean, nullable=False, default=True)
    weekly = Column(Boolean, nullable=False, default=True)
    monthly = Column(Boolean, nullable=False, default=True)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationPreferenceModel"]
