"""Query gateway contract used by rooms."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class QueryGateway(Protocol):
    """
    Sends a typed request to the backend and returns the response `result`.

    Implementations raise `ProtocolError` when the backend rejects the request.
    """

    async def query(
        self,
        collection: str,
        controller: str,
        action: str,
        request: dict[str, Any],
    ) -> dict[str, Any]:
        ...
