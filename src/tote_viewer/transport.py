from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx

from .config import ToteViewerConfig
from .exceptions import TransportFailure


class ToteTransport(Protocol):
    async def fetch_tote(self, tote_id: str) -> dict[str, Any]:
        """Return the JSON body for one tote or raise :class:`TransportFailure`."""
        ...


class HttpToteTransport:
    """GET ``{base_url}/totes/{id}`` over a shared ``httpx.AsyncClient``."""

    def __init__(self, config: ToteViewerConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.api_base_url.rstrip("/") + "/",
            timeout=config.timeout_seconds,
            verify=config.verify_ssl,
            headers={"Accept": "application/json"},
        )

    async def fetch_tote(self, tote_id: str) -> dict[str, Any]:
        try:
            response = await self._client.get(f"totes/{quote(tote_id, safe='')}")
        except httpx.TransportError as exc:
            # Timeouts are a subclass here: both mean no response was received.
            raise TransportFailure(status_code=0, payload=None, message=str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise TransportFailure(
                status_code=response.status_code,
                payload=_safe_json(response),
                message=response.reason_phrase or None,
            )
        payload = _safe_json(response)
        if not isinstance(payload, dict):
            raise TransportFailure(
                status_code=response.status_code,
                payload=None,
                message="Expected tote response to be a JSON object",
            )
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpToteTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
