"""Wikipedia page summaries with an opensearch fallback. No key required."""

from __future__ import annotations

import time
from urllib.parse import quote

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import CanonicalId, EnrichmentResult, GeneralEnrichment
from cao_engine.verification.hooks.base import HTTPHook

SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/"
OPENSEARCH_URL = "https://en.wikipedia.org/w/api.php"
CACHE_TTL_S = 24 * 60 * 60


class WikipediaHook(HTTPHook):
    name = "wikipedia"
    domains = frozenset({"general", "articles"})
    priority = 100
    requires_key = False

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._cache: dict[str, tuple[EnrichmentResult, float]] = {}

    async def _summary(self, title: str):
        return await self._client.get(SUMMARY_URL + quote(title, safe=""))

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        title = candidate.query
        key = title.lower().strip()
        cached = self._cache.get(key)
        if cached and time.monotonic() - cached[1] < CACHE_TTL_S:
            return cached[0]

        response = await self._summary(title)
        if response.status_code == 404:
            search = await self._get_json(
                OPENSEARCH_URL,
                params={"action": "opensearch", "search": title, "limit": 1, "format": "json"},
            )
            titles = search[1] if isinstance(search, list) and len(search) > 1 else []
            if not titles:
                return None
            response = await self._summary(titles[0])
            if response.status_code == 404:
                return None

        data = self._check(response)
        result = EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="wikipedia_title", value=data.get("title") or title),
            general=GeneralEnrichment(
                summary=data.get("extract"),
                thumbnail=(data.get("thumbnail") or {}).get("source"),
                wikipedia_url=((data.get("content_urls") or {}).get("desktop") or {}).get("page"),
            ),
        )
        self._cache[key] = (result, time.monotonic())
        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _ping(self) -> None:
        self._check(await self._summary("Main_Page"))
