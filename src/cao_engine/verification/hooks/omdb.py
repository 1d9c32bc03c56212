"""OMDb title lookup; the movies fallback behind TMDB."""

from __future__ import annotations

import re

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import (
    CanonicalId,
    CastMember,
    EnrichmentResult,
    MoviesEnrichment,
)
from cao_engine.verification.hooks.base import HTTPHook

BASE_URL = "https://www.omdbapi.com/"


def _present(value: str | None) -> str | None:
    return None if value in (None, "", "N/A") else value


def _float(value: str | None) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _minutes(value: str | None) -> int | None:
    match = re.match(r"\s*(\d+)", value or "")
    return int(match.group(1)) if match else None


class OMDbHook(HTTPHook):
    name = "omdb"
    domains = frozenset({"movies"})
    priority = 80

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        data = await self._get_json(
            BASE_URL, params={"t": candidate.query, "apikey": self._api_key}
        )
        if data.get("Response") == "False":
            return None

        genres = _present(data.get("Genre"))
        actors = _present(data.get("Actors"))
        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="imdb_id", value=data["imdbID"]),
            movies=MoviesEnrichment(
                rating=_float(data.get("imdbRating")),
                year=_present(data.get("Year")),
                runtime=_minutes(data.get("Runtime")),
                genres=genres.split(", ") if genres else [],
                poster_url=_present(data.get("Poster")),
                overview=_present(data.get("Plot")),
                director=_present(data.get("Director")),
                cast=[CastMember(name=n) for n in actors.split(", ")] if actors else [],
                imdb_id=data["imdbID"],
            ),
        )

    async def _ping(self) -> None:
        await self._get_json(BASE_URL, params={"t": "test", "apikey": self._api_key})
