"""YouTube Data API lookup by video id."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import CanonicalId, EnrichmentResult, VideosEnrichment
from cao_engine.verification.hooks.base import HTTPHook

VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"
YOUTUBE_ID_LENGTH = 11


def _int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class YouTubeHook(HTTPHook):
    name = "youtube"
    domains = frozenset({"videos"})
    priority = 100

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        video_id = candidate.identifiers.get("youtube_id")
        # Titles cannot be verified; only a well-formed id is looked up.
        if not isinstance(video_id, str) or len(video_id) != YOUTUBE_ID_LENGTH:
            return None

        data = await self._get_json(
            VIDEOS_URL,
            params={"part": "snippet,contentDetails,statistics", "id": video_id, "key": self._api_key},
        )
        items = data.get("items") or []
        if not items:
            return None
        item = items[0]
        snippet = item.get("snippet") or {}
        thumbnails = snippet.get("thumbnails") or {}
        stats = item.get("statistics") or {}

        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="youtube_id", value=video_id),
            videos=VideosEnrichment(
                title=snippet.get("title"),
                description=(snippet.get("description") or "")[:200] or None,
                thumbnail_url=(thumbnails.get("high") or thumbnails.get("default") or {}).get("url"),
                published_at=snippet.get("publishedAt"),
                channel_name=snippet.get("channelTitle"),
                channel_id=snippet.get("channelId"),
                video_url=f"https://www.youtube.com/watch?v={video_id}",
                duration=(item.get("contentDetails") or {}).get("duration"),
                view_count=_int(stats.get("viewCount")),
                like_count=_int(stats.get("likeCount")),
            ),
        )

    async def _ping(self) -> None:
        await self._get_json(
            VIDEOS_URL, params={"part": "snippet", "id": "dQw4w9WgXcQ", "key": self._api_key}
        )
