"""
Global listener registry.

Listeners registered here are shared by every room created from the same
client and are called for matching lifecycle events regardless of each room's
own `listening_to_*` flags.

Usage:
    registry = ListenerRegistry()

    def on_subscribed(subscription_id, result):
        print(f"{result['count']} subscribers on {subscription_id}")

    registry.on(RoomEvent.SUBSCRIBED, on_subscribed)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class RoomEvent(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    ERROR = "error"


Listener = Callable[..., Any]


class ListenerRegistry:
    """Ordered listener lists keyed by event name."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {event.value: [] for event in RoomEvent}

    def _key(self, event: Union[RoomEvent, str]) -> str:
        key = event.value if isinstance(event, RoomEvent) else event
        if key not in self._listeners:
            raise ValueError(
                f"Unknown event '{key}'. "
                f"Known events: {list(self._listeners.keys())}"
            )
        return key

    def on(self, event: Union[RoomEvent, str], listener: Listener) -> Listener:
        """Register listener for event. Returns the listener."""
        key = self._key(event)
        if not callable(listener):
            raise ConfigurationError(f"Listener for '{key}' must be callable, got {type(listener).__name__}")
        self._listeners[key].append(listener)
        logger.debug(f"Registered listener for event: {key}")
        return listener

    def off(self, event: Union[RoomEvent, str], listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        key = self._key(event)
        try:
            self._listeners[key].remove(listener)
        except ValueError:
            pass

    def remove_all(self, event: Optional[Union[RoomEvent, str]] = None) -> None:
        """Remove every listener of one event, or of all events."""
        if event is None:
            for listeners in self._listeners.values():
                listeners.clear()
            return
        self._listeners[self._key(event)].clear()

    def listeners(self, event: Union[RoomEvent, str]) -> List[Listener]:
        """Live listener list for event (not a copy)."""
        return self._listeners[self._key(event)]

    def has_listeners(self, event: Union[RoomEvent, str]) -> bool:
        return len(self.listeners(event)) > 0

    def emit(self, event: Union[RoomEvent, str], *args: Any) -> None:
        """Call every listener of event with args, in registration order."""
        key = self._key(event)
        for listener in self._listeners[key]:
            try:
                listener(*args)
            except Exception as e:
                logger.error(f"Error in listener for {key}: {e}", exc_info=True)
