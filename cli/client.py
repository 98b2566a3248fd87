from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from cli.config import CLIConfig


class DashboardFetchError(RuntimeError):
    """Raised when the API cannot be reached or answers with something other than JSON."""


class ApiClient:
    """Minimal async HTTP client for the monitor API.

    Requests carry no timeout; a hung request stalls only the cycle awaiting it.
    """

    def __init__(
        self,
        config: CLIConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url, timeout=None, transport=transport
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_latest(self) -> Dict[str, Any]:
        return await self._get_json("/api/latest")

    async def get_status(self) -> Dict[str, Any]:
        return await self._get_json("/api/status")

    async def get_history(self, device_id: str, limit: Optional[int] = None) -> Dict[str, Any]:
        return await self._get_json(
            f"/api/history/{quote(device_id, safe='')}",
            params={"limit": limit or self._config.history_limit},
        )

    async def _get_json(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise DashboardFetchError(f"Request to {path} failed: {exc}") from exc

        # Failure envelopes arrive with a 500 status and are still JSON.
        try:
            payload = response.json()
        except ValueError as exc:
            raise DashboardFetchError(
                f"Request to {path} returned status {response.status_code} without a JSON body."
            ) from exc
        if not isinstance(payload, dict):
            raise DashboardFetchError(f"Unexpected response payload from {path}.")
        return payload
