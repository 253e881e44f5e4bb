from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from roomsub import RoomClient, RoomOptions


async def flush(rounds: int = 10) -> None:
    """Let scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeGateway:
    """
    In-memory query gateway.

    Actions listed in `auto` answer immediately (or raise, for exception
    values); every other request waits until the test resolves it.
    """

    def __init__(self, auto: Optional[dict[str, Any]] = None):
        self.requests: list[tuple[str, str, str, dict]] = []
        self.auto: dict[str, Any] = {"off": {}}
        self.auto.update(auto or {})
        self._waiting: list[tuple[str, asyncio.Future]] = []
        self.closed = False

    async def query(self, collection, controller, action, request):
        self.requests.append((collection, controller, action, request))
        if action in self.auto:
            outcome = self.auto[action]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        future = asyncio.get_running_loop().create_future()
        self._waiting.append((action, future))
        return await future

    async def _next(self, action: str) -> asyncio.Future:
        for _ in range(100):
            for waiting_action, future in self._waiting:
                if waiting_action == action and not future.done():
                    return future
            await asyncio.sleep(0)
        raise AssertionError(f"No pending '{action}' request")

    async def resolve(self, action: str, result: Any) -> None:
        future = await self._next(action)
        future.set_result(result)
        await flush()

    async def reject(self, action: str, error: Exception) -> None:
        future = await self._next(action)
        future.set_exception(error)
        await flush()

    def actions(self) -> list[str]:
        return [action for _, _, action, _ in self.requests]

    def bodies(self, action: str) -> list[Any]:
        return [request.get("body") for _, _, a, request in self.requests if a == action]

    async def close(self):
        self.closed = True


class FakeTransport:
    def __init__(self):
        self.handlers: dict[str, Any] = {}
        self.history: list[tuple[str, str]] = []
        self.started = False
        self.stopped = False

    def on(self, channel, handler):
        self.handlers[channel] = handler
        self.history.append(("on", channel))

    def off(self, channel):
        self.handlers.pop(channel, None)
        self.history.append(("off", channel))

    def deliver(self, channel: str, message: dict) -> bool:
        handler = self.handlers.get(channel)
        if handler is None:
            return False
        handler(message)
        return True

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True


class Recorder:
    """(error, data) callback that records its calls."""

    def __init__(self):
        self.calls: list[tuple[Optional[Exception], Any]] = []

    def __call__(self, error, data):
        self.calls.append((error, data))

    @property
    def errors(self) -> list[Exception]:
        return [error for error, _ in self.calls if error is not None]

    @property
    def data(self) -> list[Any]:
        return [data for error, data in self.calls if error is None]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(gateway, transport) -> RoomClient:
    return RoomClient(gateway, transport, headers={"volatile": {"sdk": "python"}})


@pytest.fixture
def room(client):
    return client.room("users")


@pytest.fixture
def make_room(client):
    def factory(**options):
        return client.room("users", RoomOptions(**options))
    return factory
