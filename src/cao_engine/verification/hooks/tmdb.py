"""The Movie Database multi-search (movies and TV)."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import CanonicalId, EnrichmentResult, MoviesEnrichment
from cao_engine.verification.hooks.base import HTTPHook

SEARCH_URL = "https://api.themoviedb.org/3/search/multi"
IMAGE_BASE = "https://image.tmdb.org/t/p"

GENRES = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}


class TMDBHook(HTTPHook):
    name = "tmdb"
    domains = frozenset({"movies"})
    priority = 100

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        data = await self._get_json(
            SEARCH_URL, params={"query": candidate.query, "api_key": self._api_key}
        )
        results = [
            r for r in data.get("results") or [] if r.get("media_type", "movie") in ("movie", "tv")
        ]
        if not results:
            return None
        result = results[0]

        release = result.get("release_date") or result.get("first_air_date") or ""
        poster = result.get("poster_path")
        backdrop = result.get("backdrop_path")
        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="tmdb_id", value=str(result["id"])),
            movies=MoviesEnrichment(
                rating=result.get("vote_average"),
                year=release[:4] or None,
                genres=[GENRES[g] for g in result.get("genre_ids") or [] if g in GENRES],
                poster_url=f"{IMAGE_BASE}/w500{poster}" if poster else None,
                backdrop_url=f"{IMAGE_BASE}/w1280{backdrop}" if backdrop else None,
                overview=result.get("overview"),
            ),
        )

    async def _ping(self) -> None:
        await self._get_json(SEARCH_URL, params={"query": "test", "api_key": self._api_key})
