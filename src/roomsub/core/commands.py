"""
Commands a room accepts while a subscribe request is in flight.

Calls made during `Subscribing` are stored as one of these variants and
replayed through `SubscriptionRoom.apply` once the room settles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

# (error, data)
ResponseCallback = Callable[[Optional[Exception], Any], Any]


@dataclass(frozen=True)
class Renew:
    filters: Any
    callback: ResponseCallback


@dataclass(frozen=True)
class Count:
    callback: ResponseCallback


@dataclass(frozen=True)
class Unsubscribe:
    pass


Command = Union[Renew, Count, Unsubscribe]
