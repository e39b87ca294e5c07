"""Deliver notification intents through the connection's sink."""

from __future__ import annotations

import logging

from app.domain.entities import NotificationIntent, PermissionState
from app.infrastructure.notifications.sinks import NotificationSink

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Cache the permission outcome and hand every intent to the sink."""

    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink
        self._permission = PermissionState.UNKNOWN

    @property
    def sink(self) -> NotificationSink:
        return self._sink

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self, *, force: bool = False) -> bool:
        """Return ``True`` when notifications may be shown.

        The sink is consulted only while the state is unresolved or when
        ``force`` asks for an explicit re-request.
        """

        if force or not self._permission.resolved:
            status = await self._sink.request_permission()
            self._permission = (
                PermissionState.GRANTED
                if status is PermissionState.GRANTED
                else PermissionState.DENIED
            )
            if self._permission is PermissionState.DENIED:
                logger.warning("Notification permission was not granted")
        return self._permission is PermissionState.GRANTED

    async def dispatch(self, intent: NotificationIntent) -> None:
        """Deliver ``intent`` once; failures are logged and swallowed."""

        try:
            await self._sink.deliver(intent)
        except Exception:
            logger.exception("Error scheduling notification %r", intent.title)
