"""Tests for the room client."""

from __future__ import annotations

import pytest

from conftest import FakeGateway, FakeTransport
from roomsub import (
    ConfigurationError,
    HttpQueryGateway,
    ListenerRegistry,
    RedisTransport,
    RoomClient,
    RoomEvent,
    RoomOptions,
    RoomSettings,
    SubscriptionRoom,
)


class TestRoomClient:
    def test_requires_gateway(self):
        with pytest.raises(ConfigurationError):
            RoomClient(None, FakeTransport())

    def test_requires_transport(self):
        with pytest.raises(ConfigurationError):
            RoomClient(FakeGateway(), None)

    def test_shared_registry(self):
        registry = ListenerRegistry()
        first = RoomClient(FakeGateway(), FakeTransport(), listeners=registry)
        second = RoomClient(FakeGateway(), FakeTransport(), listeners=registry)

        first.add_listener(RoomEvent.SUBSCRIBED, lambda *args: None)

        assert second.listeners.has_listeners(RoomEvent.SUBSCRIBED)

    def test_remove_listener(self, client):
        def listener(*args):
            pass

        client.add_listener("unsubscribed", listener)
        client.remove_listener("unsubscribed", listener)
        assert client.listeners.has_listeners("unsubscribed") is False

    def test_room_factory(self, client):
        room = client.room("users", RoomOptions(listening_to_connections=True))
        assert isinstance(room, SubscriptionRoom)
        assert room.client is client
        assert room.collection == "users"
        assert room.listening_to_connections is True

    def test_add_headers_keeps_request_values(self, client):
        request = {"body": {}, "volatile": {"sdk": "custom"}}
        result = client.add_headers(request, {"volatile": {"sdk": "python"}, "jwt": "token"})

        assert result is request
        assert request == {"body": {}, "volatile": {"sdk": "custom"}, "jwt": "token"}

    def test_set_headers(self, client):
        client.set_headers({"jwt": "token"})
        assert client.headers == {"volatile": {"sdk": "python"}, "jwt": "token"}

        client.set_headers({"jwt": "other"}, replace=True)
        assert client.headers == {"jwt": "other"}

    def test_rooms_keep_headers_from_creation(self, client):
        room = client.room("users")
        client.set_headers({"jwt": "token"})
        assert "jwt" not in room.headers

    async def test_start_and_close(self, client, gateway, transport):
        await client.start()
        assert transport.started is True

        await client.close()
        assert transport.stopped is True
        assert gateway.closed is True

        with pytest.raises(ConfigurationError):
            client.room("users")

    def test_from_settings(self):
        settings = RoomSettings(
            GATEWAY_URL="http://backend:7512/",
            REDIS_URL="redis://redis:6379",
            REQUEST_TIMEOUT=5.0,
            HEADERS={"volatile": {"sdk": "python"}},
        )
        client = RoomClient.from_settings(settings)

        assert isinstance(client.gateway, HttpQueryGateway)
        assert client.gateway.base_url == "http://backend:7512"
        assert client.gateway.timeout == 5.0
        assert isinstance(client.transport, RedisTransport)
        assert client.transport.redis_url == "redis://redis:6379"
        assert client.headers == {"volatile": {"sdk": "python"}}
