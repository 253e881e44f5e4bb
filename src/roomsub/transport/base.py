"""Transport contract used by rooms."""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

# Called with each decoded message: {"error": ..., "result": {...}}
MessageHandler = Callable[[dict[str, Any]], Any]


@runtime_checkable
class Transport(Protocol):
    """Duplex channel keyed by room id."""

    def on(self, channel: str, handler: MessageHandler) -> None:
        ...

    def off(self, channel: str) -> None:
        ...
