"""
Room client.

Owns the collaborators shared by every room: the query gateway, the
notification transport, the global listener registry and default headers.

Usage:
    client = RoomClient.from_settings(RoomSettings.from_yaml("roomsub.yaml"))
    await client.start()

    client.add_listener("subscribed", lambda subscription_id, result: ...)

    room = client.room("users")
    room.renew({"term": {"status": "online"}}, on_notification)

    await client.close()
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .config import RoomSettings
from .core.errors import ConfigurationError
from .gateway import HttpQueryGateway, QueryGateway
from .listeners import Listener, ListenerRegistry, RoomEvent
from .room import RoomOptions, SubscriptionRoom
from .transport import RedisTransport, Transport

logger = logging.getLogger(__name__)


class RoomClient:
    """Factory and shared context for subscription rooms."""

    def __init__(
        self,
        gateway: QueryGateway,
        transport: Transport,
        listeners: Optional[ListenerRegistry] = None,
        headers: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize client.

        Args:
            gateway: Request/response channel to the backend
            transport: Notification channel keyed by room id
            listeners: Global listener registry (a new one if omitted)
            headers: Default headers merged into every room request

        Raises:
            ConfigurationError: If gateway or transport is missing
        """
        if gateway is None:
            raise ConfigurationError("RoomClient: a query gateway is required")
        if transport is None:
            raise ConfigurationError("RoomClient: a transport is required")

        self.gateway = gateway
        self.transport = transport
        self.listeners = listeners if listeners is not None else ListenerRegistry()
        self.headers: dict[str, Any] = dict(headers or {})
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Optional[RoomSettings] = None) -> RoomClient:
        """Build a client with the HTTP gateway and Redis transport."""
        settings = settings or RoomSettings()
        return cls(
            gateway=HttpQueryGateway(settings.GATEWAY_URL, timeout=settings.REQUEST_TIMEOUT),
            transport=RedisTransport(settings.REDIS_URL),
            headers=settings.HEADERS,
        )

    def ensure_valid(self) -> None:
        """Raise if the client can no longer create rooms."""
        if self._closed:
            raise ConfigurationError("RoomClient has been closed")

    def room(self, collection: str, options: Optional[RoomOptions] = None) -> SubscriptionRoom:
        """Create a room on collection. Nothing is sent until renew()."""
        return SubscriptionRoom(self, collection, options)

    # === Global listeners ===

    def add_listener(self, event: Union[RoomEvent, str], listener: Listener) -> Listener:
        return self.listeners.on(event, listener)

    def remove_listener(self, event: Union[RoomEvent, str], listener: Listener) -> None:
        self.listeners.off(event, listener)

    # === Headers ===

    def add_headers(self, request: dict[str, Any], headers: dict[str, Any]) -> dict[str, Any]:
        """Copy headers into request without overriding keys it already sets."""
        for key, value in headers.items():
            request.setdefault(key, value)
        return request

    def set_headers(self, content: dict[str, Any], replace: bool = False) -> RoomClient:
        """Update default headers, or replace them entirely. Affects rooms created afterwards."""
        if replace:
            self.headers = dict(content)
        else:
            self.headers.update(content)
        return self

    # === Lifecycle ===

    async def start(self):
        """Start collaborators that hold connections"""
        start = getattr(self.transport, "start", None)
        if start is not None:
            await start()
        logger.info("Room client started")

    async def close(self):
        """Stop collaborators and refuse new rooms"""
        self._closed = True

        stop = getattr(self.transport, "stop", None)
        if stop is not None:
            await stop()

        close = getattr(self.gateway, "close", None)
        if close is not None:
            await close()

        logger.info("Room client closed")
