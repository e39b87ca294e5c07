"""Pydantic models for change-feed webhook deliveries."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChangeWebhookPayload(BaseModel):
    """Row change in the Supabase Database Webhook format."""

    type: Literal["INSERT", "UPDATE", "DELETE"]
    table: str = Field(..., min_length=1)
    schema_name: str = Field(default="public", alias="schema")
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}

    def owner_id(self, column: str = "user_id") -> str | None:
        """Return the owner of the changed row, if it carries one."""

        row = self.record if self.type != "DELETE" else self.old_record
        value = (row or {}).get(column)
        if value in (None, ""):
            return None
        return str(value)

    def row(self) -> dict[str, Any]:
        if self.type == "DELETE":
            return self.old_record or {}
        return self.record or {}


class ChangeWebhookResponse(BaseModel):
    """Number of open subscriptions that received the change."""

    delivered: int


__all__ = ["ChangeWebhookPayload", "ChangeWebhookResponse"]
