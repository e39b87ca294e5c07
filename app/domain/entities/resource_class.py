"""Horoscope resource classes watched by the realtime relay."""

from __future__ import annotations

from enum import Enum


class ResourceClass(str, Enum):
    """Horoscope table that a change-feed subscription watches."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def table(self) -> str:
        """Return the backend table holding rows of this class."""

        return f"{self.value}_horoscopes"

    @classmethod
    def from_table(cls, table: str) -> "ResourceClass | None":
        """Return the class stored in ``table`` or ``None`` for other tables."""

        for resource_class in cls:
            if resource_class.table == table:
                return resource_class
        return None


WATCHED_RESOURCE_CLASSES: tuple[ResourceClass, ...] = (
    ResourceClass.DAILY,
    ResourceClass.WEEKLY,
    ResourceClass.MONTHLY,
)


__all__ = ["ResourceClass", "WATCHED_RESOURCE_CLASSES"]
