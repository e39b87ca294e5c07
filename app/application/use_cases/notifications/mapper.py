"""Translate horoscope change events into notification intents."""

from __future__ import annotations

from typing import Any

from app.domain.entities import (
    ChangeEvent,
    ChangeOperation,
    NotificationIntent,
    ResourceClass,
)

NOTIFICATION_COPY: dict[tuple[ResourceClass, ChangeOperation], tuple[str, str]] = {
    (ResourceClass.DAILY, ChangeOperation.INSERTED): (
        "Your Daily Horoscope is Ready!",
        "Discover what the stars have in store for you today.",
    ),
    (ResourceClass.DAILY, ChangeOperation.UPDATED): (
        "Your Daily Horoscope Updated",
        "Your cosmic insights have been refreshed.",
    ),
    (ResourceClass.WEEKLY, ChangeOperation.INSERTED): (
        "Your Weekly Horoscope is Here!",
        "Plan your week with cosmic guidance.",
    ),
    (ResourceClass.WEEKLY, ChangeOperation.UPDATED): (
        "Weekly Horoscope Updated",
        "Your weekly cosmic forecast has been updated.",
    ),
    (ResourceClass.MONTHLY, ChangeOperation.INSERTED): (
        "Your Monthly Horoscope Awaits!",
        "Explore your cosmic journey for the month ahead.",
    ),
    (ResourceClass.MONTHLY, ChangeOperation.UPDATED): (
        "Monthly Horoscope Refreshed",
        "Your monthly cosmic insights have been updated.",
    ),
}


def map_change_event(
    resource_class: ResourceClass | str,
    operation: ChangeOperation | str,
    payload: Any,
) -> NotificationIntent | None:
    """Return the intent for a change, or ``None`` when it is not announced."""

    try:
        key = (ResourceClass(resource_class), ChangeOperation(operation))
    except ValueError:
        return None
    copy = NOTIFICATION_COPY.get(key)
    if copy is None:
        return None
    title, body = copy
    return NotificationIntent(
        title=title,
        body=body,
        data={"resource_class": key[0].value, "payload": payload},
    )


def map_event(event: ChangeEvent) -> NotificationIntent | None:
    return map_change_event(event.resource_class, event.operation, event.payload)
