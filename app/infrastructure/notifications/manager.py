"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Set

if TYPE_CHECKING:
    from app.application.use_cases.notifications import NotificationRelay

logger = logging.getLogger(__name__)


class RelayConnectionManager:
    """Track the relay owned by every open device connection."""

    def __init__(self) -> None:
        self._relays: Set["NotificationRelay"] = set()

    def __len__(self) -> int:
        return len(self._relays)

    def connect(self, relay: "NotificationRelay") -> None:
        """Register ``relay`` and start applying its identity changes."""

        self._relays.add(relay)
        relay.start()

    async def disconnect(self, relay: "NotificationRelay") -> None:
        """Tear ``relay`` down and forget it."""

        self._relays.discard(relay)
        await relay.close()

    def relays_for(self, user_id: str) -> list["NotificationRelay"]:
        return [relay for relay in self._relays if relay.identity == user_id]

    async def refresh_preferences(self, user_id: str) -> None:
        """Reload preference snapshots of every relay signed in as ``user_id``."""

        for relay in self.relays_for(user_id):
            await relay.refresh_preferences()

    async def close_all(self) -> None:
        """Close every relay; used on application shutdown."""

        relays, self._relays = list(self._relays), set()
        for relay in relays:
            try:
                await relay.close()
            except Exception:
                logger.exception("Failed to close notification relay")


relay_manager = RelayConnectionManager()


__all__ = ["RelayConnectionManager", "relay_manager"]
