"""Update Source client: pushes live values into a running hub over HTTP."""

from typing import Any

import httpx

from . import config
from .telemetry import get_logger

logger = get_logger(__name__)

VARIABLES_ENDPOINT = "/api/variables"
DEFAULT_TIMEOUT = 5.0


def build_update(name: str, text: str, color: str | None = None) -> dict[str, dict[str, str]]:
    """Single-variable live update event: ``{name: {"text": ..., "color": ...}}``."""
    value: dict[str, str] = {"text": text}
    if color:
        value["color"] = color
    return {name: value}


class UpdateSourceClient:
    """Async client for the hub's update ingress.

    Usage::

        async with UpdateSourceClient("http://localhost:3333") as source:
            await source.push(build_update("score", "3 - 1", "#ff0000"))
    """

    def __init__(
        self,
        base_url: str = f"http://localhost:{config.DEFAULT_PORT}",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Reuse one client until it is closed."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, timeout=self._timeout, transport=self._transport
            )
        return self._client

    async def push(self, update: dict[str, Any]) -> dict[str, Any]:
        """Send one live update event.

        Returns:
            The hub's response: ``{"success", "message", "delivered"}``

        Raises:
            httpx.HTTPError: on transport errors or a non-2xx response
        """
        client = await self._get_client()
        response = await client.post(VARIABLES_ENDPOINT, json=update)
        response.raise_for_status()
        result = response.json()
        logger.debug(f"[Source] Pushed {list(update)} -> delivered to {result.get('delivered')}")
        return result

    async def push_value(self, name: str, text: str, color: str | None = None) -> dict[str, Any]:
        return await self.push(build_update(name, text, color))

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "UpdateSourceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
