"""
Subscription phases.

A room is always in exactly one phase; identity fields only exist on `Active`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Idle:
    """No live subscription and no request in flight."""
    pass


@dataclass(frozen=True)
class Subscribing:
    """Subscribe request sent, response not processed yet."""
    since: float


@dataclass(frozen=True)
class Active:
    """Subscribed; `room_id` keys the transport channel."""
    room_id: str
    subscription_id: str
    since: float


Phase = Union[Idle, Subscribing, Active]

IDLE = Idle()
