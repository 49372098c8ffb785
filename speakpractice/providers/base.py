"""Abstract base class for provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from speakpractice.config import ProviderCredentials
from speakpractice.errors import ConfigurationMissing, ProviderError

DEFAULT_TIMEOUT = 60.0


class ProviderAdapter(ABC):
    """Wraps one external service behind a normalized contract.

    Primary operations issue exactly one request and raise ProviderError on
    any failure. Retrying or falling back is the caller's job.
    """

    name: str = "provider"
    # Sentinel keys shipped in templates; a key equal to one of these is unset
    PLACEHOLDERS: tuple = ()

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.credentials = credentials or ProviderCredentials()
        self._transport = transport
        self._timeout = timeout

    def configure(self, credentials: ProviderCredentials) -> None:
        """Store credentials. Reachability is not checked here."""
        self.credentials = credentials

    def is_ready(self) -> bool:
        key = (self.credentials.api_key or "").strip()
        return bool(key) and key not in self.PLACEHOLDERS

    def _require_ready(self) -> None:
        if not self.is_ready():
            raise ConfigurationMissing(self.name)

    @abstractmethod
    async def _ping(self) -> None:
        """Issue one real request; raise on failure."""

    async def test_connection(self) -> bool:
        """Best-effort startup diagnostic. Never raises."""
        try:
            await self._ping()
        except Exception as e:
            print(f"[{self.name.upper()}] Connection test failed: {e}")
            return False
        print(f"[{self.name.upper()}] Connection test successful")
        return True

    def status(self) -> Dict[str, Any]:
        return {"name": self.name, "ready": self.is_ready()}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _post(
        self,
        url: str,
        *,
        json: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """POST once and map every failure onto ProviderError."""
        try:
            async with self._client() as client:
                r = await client.post(url, json=json, headers=headers, params=params)
        except httpx.RequestError as e:
            raise ProviderError(self.name, type(e).__name__, str(e)) from e

        if r.is_error:
            raise ProviderError(self.name, r.status_code, _error_message(r))
        return r


def _error_message(r: httpx.Response) -> str:
    """Pull a readable message out of a provider error body."""
    try:
        data = r.json()
    except ValueError:
        return r.text[:300] or "Unknown error"

    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str):
        return err

    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if isinstance(detail, str):
        return detail
    return "Unknown error"
