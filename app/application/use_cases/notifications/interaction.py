"""Route taps on delivered notifications."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable

from app.domain.entities import NotificationInteraction, ResourceClass

logger = logging.getLogger(__name__)

InteractionHandler = Callable[[NotificationInteraction], "Awaitable[None] | None"]


def log_interaction(interaction: NotificationInteraction) -> None:
    logger.info("Notification pressed with data: %s", interaction)


class InteractionRouter:
    """Extract the structured payload of a tapped notification."""

    def __init__(self, handler: InteractionHandler | None = None) -> None:
        self._handler = handler or log_interaction

    async def on_notification_tapped(self, data: Any) -> NotificationInteraction | None:
        if not isinstance(data, dict) or not data.get("resource_class"):
            logger.debug("Ignoring notification tap without a resource class")
            return None
        raw_class = data["resource_class"]
        try:
            resource_class: ResourceClass | str = ResourceClass(raw_class)
        except ValueError:
            resource_class = raw_class
        interaction = NotificationInteraction(
            resource_class=resource_class, payload=data.get("payload")
        )
        result = self._handler(interaction)
        if inspect.isawaitable(result):
            await result
        return interaction
