"""Domain entity holding a user's horoscope notification preferences."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .resource_class import ResourceClass


@dataclass
class NotificationPreference:
    """Which horoscope notifications a user wants to receive."""

    user_id: str
    enabled: bool = True
    daily: bool = True
    weekly: bool = True
    monthly: bool = True
    updated_at: datetime | None = None

    def allows(self, resource_class: ResourceClass) -> bool:
        """Return ``True`` when notifications for ``resource_class`` are wanted."""

        if not self.enabled:
            return False
        return bool(getattr(self, resource_class.value))


__all__ = ["NotificationPreference"]
