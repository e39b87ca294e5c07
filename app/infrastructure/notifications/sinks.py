"""Notification sinks selected once per device connection."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from app.domain.entities import NotificationIntent, PermissionState

from .facility import FacilityListener, ListenerHandle, NotificationFacility

logger = logging.getLogger(__name__)

DEGRADED_PLATFORMS = frozenset({"web"})


class NotificationSink(Protocol):
    """Port: deliver notification intents on one kind of platform."""

    async def request_permission(self) -> PermissionState: ...

    async def deliver(self, intent: NotificationIntent) -> None: ...

    def listen(
        self, on_received: FacilityListener, on_response: FacilityListener
    ) -> list[ListenerHandle]: ...


class NativeSink:
    """Hand intents to the device facility for immediate delivery."""

    def __init__(self, facility: NotificationFacility) -> None:
        self._facility = facility

    async def request_permission(self) -> PermissionState:
        status = await self._facility.get_permissions()
        if status is not PermissionState.GRANTED:
            status = await self._facility.request_permissions()
        return status

    async def deliver(self, intent: NotificationIntent) -> None:
        await self._facility.schedule(build_schedule_request(intent))

    def listen(
        self, on_received: FacilityListener, on_response: FacilityListener
    ) -> list[ListenerHandle]:
        return [
            self._facility.add_received_listener(on_received),
            self._facility.add_response_listener(on_response),
        ]


class NoopSink:
    """Sink for platforms without a local-notification service.

    Nothing is delivered, but taps and arrivals reported by the device still
    reach the relay when a facility is attached.
    """

    def __init__(self, facility: NotificationFacility | None = None) -> None:
        self._facility = facility

    async def request_permission(self) -> PermissionState:
        return PermissionState.GRANTED

    async def deliver(self, intent: NotificationIntent) -> None:
        logger.debug("Skipping notification on degraded platform: %s", intent.title)

    def listen(
        self, on_received: FacilityListener, on_response: FacilityListener
    ) -> list[ListenerHandle]:
        if self._facility is None:
            return []
        return [
            self._facility.add_received_listener(on_received),
            self._facility.add_response_listener(on_response),
        ]


def build_schedule_request(intent: NotificationIntent) -> dict[str, Any]:
    """Return the facility request for an immediate (``trigger=None``) delivery."""

    return {
        "content": {
            "title": intent.title,
            "body": intent.body,
            "data": intent.data,
            "sound": "default",
        },
        "trigger": None,
    }


def select_sink(platform: str | None, facility: NotificationFacility) -> NotificationSink:
    """Pick the sink for ``platform``; unknown platforms are treated as native."""

    if (platform or "").strip().lower() in DEGRADED_PLATFORMS:
        return NoopSink(facility)
    return NativeSink(facility)


__all__ = [
    "DEGRADED_PLATFORMS",
    "NativeSink",
    "NoopSink",
    "NotificationSink",
    "build_schedule_request",
    "select_sink",
]
