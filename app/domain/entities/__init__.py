"""Domain entities exposed by the application."""

from .change_event import ChangeEvent, ChangeOperation
from .notification import NotificationIntent, NotificationInteraction, PermissionState
from .notification_preference import NotificationPreference
from .resource_class import WATCHED_RESOURCE_CLASSES, ResourceClass

__all__ = [
    "ChangeEvent",
    "ChangeOperation",
    "NotificationIntent",
    "NotificationInteraction",
    "PermissionState",
    "NotificationPreference",
    "ResourceClass",
    "WATCHED_RESOURCE_CLASSES",
]
