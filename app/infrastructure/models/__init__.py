"""ORM models used by the application infrastructure."""

from .notification_preference import NotificationPreferenceModel

__all__ = ["NotificationPreferenceModel"]
