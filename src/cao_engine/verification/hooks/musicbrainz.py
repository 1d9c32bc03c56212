"""MusicBrainz recording search with an artist fallback. No key required."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import CanonicalId, EnrichmentResult, MusicEnrichment
from cao_engine.verification.hooks.base import HTTPHook

BASE_URL = "https://musicbrainz.org/ws/2"


def _tags(entity: dict) -> list[str]:
    return [t["name"] for t in entity.get("tags") or [] if t.get("name")]


class MusicBrainzHook(HTTPHook):
    name = "musicbrainz"
    domains = frozenset({"music"})
    priority = 90
    requires_key = False

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        query = candidate.query
        artist = candidate.identifiers.get("artist")
        search = f'"{query}" AND artist:"{artist}"' if artist else query

        data = await self._get_json(
            f"{BASE_URL}/recording/", params={"query": search, "limit": 5, "fmt": "json"}
        )
        recordings = data.get("recordings") or []
        if recordings:
            recording = recordings[0]
            credit = (recording.get("artist-credit") or [{}])[0]
            release = (recording.get("releases") or [{}])[0]
            return EnrichmentResult(
                verified=True,
                source=self.name,
                canonical=CanonicalId(type="musicbrainz_id", value=recording["id"]),
                music=MusicEnrichment(
                    artist=credit.get("name") or (credit.get("artist") or {}).get("name"),
                    album=release.get("title"),
                    duration_ms=recording.get("length"),
                    release_date=release.get("date"),
                    genres=_tags(recording),
                ),
            )

        data = await self._get_json(
            f"{BASE_URL}/artist/", params={"query": query, "limit": 5, "fmt": "json"}
        )
        artists = data.get("artists") or []
        if not artists:
            return None
        found = artists[0]
        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="musicbrainz_id", value=found["id"]),
            music=MusicEnrichment(artist=found.get("name"), genres=_tags(found)),
        )

    async def _ping(self) -> None:
        await self._get_json(
            f"{BASE_URL}/artist/", params={"query": "radiohead", "limit": 1, "fmt": "json"}
        )
