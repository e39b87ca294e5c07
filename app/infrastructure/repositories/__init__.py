"""Repository implementations for infrastructure layer."""

from .notification_preference_repository import NotificationPreferenceRepository

__all__ = ["NotificationPreferenceRepository"]
