"""Realtime relay from horoscope changes to device notifications."""

from .dispatcher import NotificationDispatcher
from .interaction import InteractionRouter, log_interaction
from .mapper import NOTIFICATION_COPY, map_change_event, map_event
from .relay import NotificationRelay
from .session import SessionGate
from .subscriptions import SubscriptionManager

__all__ = [
    "NOTIFICATION_COPY",
    "InteractionRouter",
    "NotificationDispatcher",
    "NotificationRelay",
    "SessionGate",
    "SubscriptionManager",
    "log_interaction",
    "map_change_event",
    "map_event",
]
