"""
Core module - errors, wire models, commands and subscription phases.
"""

from __future__ import annotations

from .commands import Command, Count, Renew, ResponseCallback, Unsubscribe
from .errors import (
    ConfigurationError,
    NotificationError,
    ProtocolError,
    RoomError,
    SubscriptionError,
)
from .models import CountResult, Notification, SubscribeResult
from .state import IDLE, Active, Idle, Phase, Subscribing

__all__ = [
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
    "IDLE",
]
