"""
Pydantic models for messages exchanged with the notification backend.

These validate subscribe responses and inbound room notifications before the
room acts on them.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubscribeResult(BaseModel):
    """
    Result of a successful subscribe request.

    Example:
    {
        "roomId": "8fd7c1...",
        "roomName": "a1b2c3..."
    }
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    room_id: str = Field(alias="roomId")
    room_name: str = Field(alias="roomName")


class CountResult(BaseModel):
    """Result of a count request: number of subscriptions on the room."""
    model_config = ConfigDict(extra="allow")

    count: int


class Notification(BaseModel):
    """
    Message delivered on a room channel.

    Example:
    {
        "error": null,
        "result": {"action": "on", "collection": "users", ...}
    }

    `result` is kept as a plain dict: its fields are forwarded to callers
    untouched, plus `count` for lifecycle notifications.
    """
    model_config = ConfigDict(extra="allow")

    error: Optional[Any] = None
    result: dict[str, Any] = Field(default_factory=dict)

    @property
    def action(self) -> Optional[str]:
        return self.result.get("action")
