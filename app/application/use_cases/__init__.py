"""Aggregate application use cases."""

from .preferences import (
    get_notification_preferences,
    load_notification_preferences,
    update_notification_preferences,
)

__all__ = [
    "get_notification_preferences",
    "load_notification_preferences",
    "update_notification_preferences",
]
