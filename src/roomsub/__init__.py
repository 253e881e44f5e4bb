"""
roomsub - client-side rooms for a real-time notification backend.

A room subscribes to documents and messages matching a set of filters and
delivers notifications as they arrive:
- renew(filters, callback): (re)subscribe with new filters
- count(callback): number of subscriptions sharing the room
- unsubscribe(): tear the subscription down

Usage:
    from roomsub import RoomClient, RoomOptions

    client = RoomClient.from_settings()
    await client.start()

    room = client.room("users", RoomOptions(listening_to_connections=True))
    room.renew({"term": {"status": "online"}}, on_notification)
"""

from __future__ import annotations

from .client import RoomClient
from .config import RoomSettings
from .core import (
    Active,
    Command,
    ConfigurationError,
    Count,
    CountResult,
    Idle,
    Notification,
    NotificationError,
    Phase,
    ProtocolError,
    Renew,
    ResponseCallback,
    RoomError,
    SubscribeResult,
    Subscribing,
    SubscriptionError,
    Unsubscribe,
)
from .gateway import HttpQueryGateway, QueryGateway
from .listeners import ListenerRegistry, RoomEvent
from .room import RoomOptions, SubscriptionRoom
from .transport import MessageHandler, RedisTransport, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "RoomClient",
    "RoomSettings",
    # Room
    "SubscriptionRoom",
    "RoomOptions",
    # Listeners
    "ListenerRegistry",
    "RoomEvent",
    # Errors
    "RoomError",
    "ConfigurationError",
    "ProtocolError",
    "SubscriptionError",
    "NotificationError",
    # Models
    "SubscribeResult",
    "CountResult",
    "Notification",
    # Commands
    "Command",
    "Renew",
    "Count",
    "Unsubscribe",
    "ResponseCallback",
    # Phases
    "Phase",
    "Idle",
    "Subscribing",
    "Active",
    # Collaborators
    "QueryGateway",
    "HttpQueryGateway",
    "Transport",
    "MessageHandler",
    "RedisTransport",
]
