"""Pydantic models describing notification preference payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationPreferenceRead(BaseModel):
    """Preferences returned to the authenticated user."""

    user_id: str
    enabled: bool
    daily: bool
    weekly: bool
    monthly: bool
    updated_at: datetime | None = None


class NotificationPreferenceUpdate(BaseModel):
    """Partial update of the notification switches."""

    enabled: bool | None = Field(default=None, description="Master switch for horoscope notifications")
    daily: bool | None = Field(default=None, description="Notify about daily horoscopes")
    weekly: bool | None = Field(default=None, description="Notify about weekly horoscopes")
    monthly: bool | None = Field(default=None, description="Notify about monthly horoscopes")


__all__ = ["NotificationPreferenceRead", "NotificationPreferenceUpdate"]
