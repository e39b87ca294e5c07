"""Keep exactly one change-feed subscription per horoscope class open."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from app.domain.entities import (
    WATCHED_RESOURCE_CLASSES,
    ChangeEvent,
    ChangeOperation,
    ResourceClass,
)
from app.infrastructure.notifications.realtime import (
    ChangeFeed,
    ChangeFeedError,
    SubscriptionHandle,
)

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]


class SubscriptionManager:
    """Own the subscriptions of the current identity.

    Handles of a previous identity are always closed before any handle of the
    next identity is opened. A handle that fails to open is not retried; its
    class stays silent until the next identity change.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        on_change: ChangeHandler,
        *,
        resource_classes: tuple[ResourceClass, ...] = WATCHED_RESOURCE_CLASSES,
    ) -> None:
        self._feed = feed
        self._on_change = on_change
        self._resource_classes = resource_classes
        self._identity: str | None = None
        self._handles: dict[ResourceClass, SubscriptionHandle] = {}

    @property
    def identity(self) -> str | None:
        return self._identity

    @property
    def open_resource_classes(self) -> frozenset[ResourceClass]:
        return frozenset(self._handles)

    def on_identity_changed(self, identity: str | None) -> None:
        self._close_all()
        self._identity = identity
        if identity is None:
            return
        for resource_class in self._resource_classes:
            try:
                handle = self._feed.subscribe(
                    resource_class,
                    owner_id=identity,
                    on_inserted=self._callback(resource_class, ChangeOperation.INSERTED),
                    on_updated=self._callback(resource_class, ChangeOperation.UPDATED),
                )
            except ChangeFeedError as exc:
                logger.error(
                    "Could not subscribe to %s for %s: %s",
                    resource_class.table,
                    identity,
                    exc,
                )
                continue
            self._handles[resource_class] = handle

    def close(self) -> None:
        self.on_identity_changed(None)

    def _close_all(self) -> None:
        handles, self._handles = self._handles, {}
        for resource_class, handle in handles.items():
            try:
                handle.close()
            except Exception:
                logger.exception("Failed to close %s subscription", resource_class.table)

    def _callback(
        self, resource_class: ResourceClass, operation: ChangeOperation
    ) -> Callable[[Any], Awaitable[None]]:
        async def forward(payload: Any) -> None:
            logger.debug("Horoscope %s %s: %s", resource_class.value, operation.value, payload)
            await self._on_change(ChangeEvent(resource_class, operation, payload))

        return forward
