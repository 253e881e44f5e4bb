"""
HTTP query gateway.

Makes POST /{collection}/{controller}/{action} calls to the notification
backend and unwraps the `result` member of the response.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.errors import ProtocolError

logger = logging.getLogger(__name__)


class HttpQueryGateway:
    """
    HTTP client for subscribe/unsubscribe/count requests.

    Usage:
        gateway = HttpQueryGateway("http://backend:7512")
        result = await gateway.query(
            "users",
            "subscribe",
            "count",
            {"body": {"roomId": "8fd7c1..."}},
        )
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize gateway.

        Args:
            base_url: Base URL of the backend (e.g., "http://backend:7512")
            timeout: HTTP request timeout in seconds
            client: Preconfigured httpx client (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def query(
        self,
        collection: str,
        controller: str,
        action: str,
        request: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Send request and return the response result.

        Args:
            collection: Target collection name
            controller: Backend controller (e.g., "subscribe")
            action: Controller action ("on", "off", "count")
            request: Request payload (headers plus body)

        Returns:
            The `result` member of the response

        Raises:
            ProtocolError: If the backend returns an error or is unreachable
        """
        client = await self._get_client()
        url = f"{self.base_url}/{collection}/{controller}/{action}"

        try:
            response = await client.post(url, json=request)
        except httpx.RequestError as e:
            raise ProtocolError(controller, action, str(e), status_code=0)

        if response.status_code != 200:
            raise ProtocolError(controller, action, response.text, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(controller, action, f"invalid JSON response: {e}", status_code=response.status_code)

        if not isinstance(data, dict):
            raise ProtocolError(
                controller,
                action,
                f"expected a JSON object, got {type(data).__name__}",
                status_code=response.status_code,
            )

        if data.get("error"):
            raise ProtocolError(controller, action, str(data["error"]), status_code=response.status_code)

        logger.debug(f"{controller}:{action} on {collection} answered: {data.get('result')}")
        return data.get("result") or {}
