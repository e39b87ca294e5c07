"""Realtime notification helpers for the infrastructure layer."""

from .facility import (
    DeviceNotificationFacility,
    FacilityListenerHandle,
    NotificationFacility,
)
from .manager import RelayConnectionManager, relay_manager
from .realtime import (
    ChangeFeed,
    ChangeFeedBroker,
    ChangeFeedError,
    ChangeFeedFilter,
    change_feed_broker,
)
from .sinks import NativeSink, NoopSink, NotificationSink, select_sink

__all__ = [
    "ChangeFeed",
    "ChangeFeedBroker",
    "ChangeFeedError",
    "ChangeFeedFilter",
    "change_feed_broker",
    "DeviceNotificationFacility",
    "FacilityListenerHandle",
    "NotificationFacility",
    "RelayConnectionManager",
    "relay_manager",
    "NativeSink",
    "NoopSink",
    "NotificationSink",
    "select_sink",
]
