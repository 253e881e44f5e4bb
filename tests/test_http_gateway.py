"""Tests for the HTTP query gateway."""

from __future__ import annotations

import json

import httpx
import pytest

from roomsub import HttpQueryGateway, ProtocolError


def make_gateway(handler) -> HttpQueryGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpQueryGateway("http://backend:7512/", client=client)


class TestHttpQueryGateway:
    async def test_returns_result(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, str(request.url), json.loads(request.content)))
            return httpx.Response(200, json={"error": None, "result": {"roomId": "r1", "roomName": "s1"}})

        gateway = make_gateway(handler)
        result = await gateway.query("users", "subscribe", "on", {"body": {"field": "x"}})

        assert result == {"roomId": "r1", "roomName": "s1"}
        assert seen == [("POST", "http://backend:7512/users/subscribe/on", {"body": {"field": "x"}})]
        await gateway.close()

    async def test_missing_result(self):
        gateway = make_gateway(lambda request: httpx.Response(200, json={}))
        assert await gateway.query("users", "subscribe", "off", {}) == {}

    async def test_http_error_status(self):
        gateway = make_gateway(lambda request: httpx.Response(400, text="bad filters"))

        with pytest.raises(ProtocolError) as exc_info:
            await gateway.query("users", "subscribe", "on", {"body": {}})

        assert exc_info.value.status_code == 400
        assert exc_info.value.action == "on"
        assert "bad filters" in str(exc_info.value)

    async def test_error_in_body(self):
        gateway = make_gateway(
            lambda request: httpx.Response(200, json={"error": {"message": "unknown room"}, "result": None})
        )

        with pytest.raises(ProtocolError) as exc_info:
            await gateway.query("users", "subscribe", "count", {"body": {"roomId": "r1"}})

        assert exc_info.value.controller == "subscribe"
        assert "unknown room" in str(exc_info.value)

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(ProtocolError) as exc_info:
            await gateway.query("users", "subscribe", "on", {})

        assert exc_info.value.status_code == 0

    async def test_close_is_idempotent(self):
        gateway = HttpQueryGateway("http://backend:7512")
        await gateway.close()
        await gateway.close()

    async def test_body_is_not_json(self):
        gateway = make_gateway(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(ProtocolError) as exc_info:
            await gateway.query("users", "subscribe", "count", {"body": {"roomId": "r1"}})

        assert exc_info.value.status_code == 200
        assert "invalid JSON" in str(exc_info.value)

    async def test_body_is_not_an_object(self):
        gateway = make_gateway(lambda request: httpx.Response(200, json=["r1", "r2"]))

        with pytest.raises(ProtocolError) as exc_info:
            await gateway.query("users", "subscribe", "count", {"body": {"roomId": "r1"}})

        assert "expected a JSON object" in str(exc_info.value)
