"""Shared httpx plumbing for provider hooks."""

from __future__ import annotations

from typing import Any

import httpx

from cao_engine.exceptions import ConfigurationError, ProviderError
from cao_engine.observability.logger import get_logger

logger = get_logger("hooks")

DEFAULT_USER_AGENT = "cao-engine/1.0 (verification)"


class HTTPHook:
    """Base for hooks that call a JSON HTTP API.

    Subclasses set ``name``, ``domains`` and ``priority`` and implement
    ``enrich`` and ``_ping``. Hooks with ``requires_key`` refuse to be built
    without a credential. Pass ``client`` to share or mock the transport.
    """

    name: str = ""
    domains: frozenset[str] = frozenset()
    priority: int = 50
    requires_key: bool = True

    def __init__(
        self,
        api_key: str = "",
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        if self.requires_key and not api_key:
            raise ConfigurationError(f"Hook {self.name} requires an API key")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s),
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )

    def _check(self, response: httpx.Response) -> Any:
        if not response.is_success:
            raise ProviderError(f"{self.name} returned HTTP {response.status_code}")
        return response.json()

    async def _get_json(
        self, url: str, params: dict | None = None, headers: dict | None = None
    ) -> Any:
        response = await self._client.get(url, params=params, headers=headers)
        return self._check(response)

    async def _post_json(self, url: str, body: dict, headers: dict | None = None) -> Any:
        response = await self._client.post(url, json=body, headers=headers)
        return self._check(response)

    async def _ping(self) -> None:
        raise NotImplementedError

    async def health_check(self) -> bool:
        try:
            await self._ping()
            return True
        except (httpx.HTTPError, ProviderError, ValueError) as e:
            logger.warning("hook_health_check_failed", hook=self.name, error=str(e))
            return False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
