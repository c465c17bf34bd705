"""HTTP client for the Baileys Node bridge."""

from __future__ import annotations

from typing import Any

import httpx

from whatsapp_hub.core.config import BaileysSettings
from whatsapp_hub.core.logging import get_logger

logger = get_logger(__name__)


class BridgeError(Exception):
    """Raised when the bridge answers with a non-2xx status or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BaileysBridgeClient:
    """Thin async wrapper around the bridge REST endpoints.

    One client is shared by every provider instance in the process so the
    underlying connection pool is reused.
    """

    def __init__(
        self,
        settings: BaileysSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def settings(self) -> BaileysSettings:
        return self._settings

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._settings.timeout_seconds,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        client = self._get_client()
        try:
            response = await client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("bridge.unreachable", method=method, path=path, error=str(exc))
            raise BridgeError(f"Bridge request failed: {exc}") from exc

        if not response.is_success:
            raise BridgeError(
                f"Bridge returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        if not response.content:
            return {}
        data = response.json()
        return data if isinstance(data, dict) else {"data": data}

    async def initialize_session(self, session_id: str, phone_number: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/sessions/initialize",
            {"sessionId": session_id, "phoneNumber": phone_number},
        )

    async def get_session_status(self, session_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/sessions/{session_id}/status")

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/api/sessions/{session_id}")

    async def send_message(self, kind: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to ``/api/messages/{kind}`` where kind is text, media, location or audio."""

        return await self._request("POST", f"/api/messages/{kind}", payload)

