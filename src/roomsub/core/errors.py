"""
Custom exceptions for roomsub.
"""

from __future__ import annotations

from typing import Any, Optional


class RoomError(Exception):
    """Base exception for all roomsub errors."""
    pass


class ConfigurationError(RoomError):
    """Raised when a room or client is built without a required collaborator or callback."""
    pass


class ProtocolError(RoomError):
    """Raised when the backend rejects a subscribe/unsubscribe/count request."""

    def __init__(
        self,
        controller: str,
        action: str,
        message: str,
        status_code: int = 0,
    ):
        self.controller = controller
        self.action = action
        self.status_code = status_code
        super().__init__(f"Request {controller}:{action} failed ({status_code}): {message}")


class SubscriptionError(RoomError):
    """Raised when a renew cannot complete. The room is left idle."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"Error during subscription to '{collection}': {message}")


class NotificationError(RoomError):
    """Error carried inside an inbound notification payload."""

    def __init__(self, payload: Any, room_id: Optional[str] = None):
        self.payload = payload
        self.room_id = room_id
        super().__init__(f"Notification error{f' on room {room_id}' if room_id else ''}: {payload}")
