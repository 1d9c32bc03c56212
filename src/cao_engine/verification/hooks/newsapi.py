"""NewsAPI article search; serves both articles and news."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import (
    ArticlesEnrichment,
    CanonicalId,
    EnrichmentResult,
    NewsEnrichment,
)
from cao_engine.verification.hooks.base import HTTPHook

BASE_URL = "https://newsapi.org/v2"


class NewsAPIHook(HTTPHook):
    name = "newsapi"
    domains = frozenset({"articles", "news"})
    priority = 90

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        data = await self._get_json(
            f"{BASE_URL}/everything",
            params={
                "q": candidate.query,
                "apiKey": self._api_key,
                "pageSize": 1,
                "sortBy": "relevancy",
            },
        )
        articles = data.get("articles") or []
        if not articles:
            return None
        article = articles[0]

        fields = dict(
            title=article.get("title"),
            author=article.get("author"),
            published_at=article.get("publishedAt"),
            source=(article.get("source") or {}).get("name"),
            image_url=article.get("urlToImage"),
            url=article.get("url"),
            summary=article.get("description"),
        )
        canonical = CanonicalId(type="url", value=article["url"]) if article.get("url") else None
        if context.domain == "news":
            return EnrichmentResult(
                verified=True, source=self.name, canonical=canonical, news=NewsEnrichment(**fields)
            )
        return EnrichmentResult(
            verified=True, source=self.name, canonical=canonical, articles=ArticlesEnrichment(**fields)
        )

    async def _ping(self) -> None:
        await self._get_json(
            f"{BASE_URL}/top-headlines",
            params={"country": "us", "pageSize": 1, "apiKey": self._api_key},
        )
