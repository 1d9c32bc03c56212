"""Fixed tables shared by generation, verification and assembly."""

from __future__ import annotations

DOMAINS = (
    "places",
    "movies",
    "music",
    "events",
    "videos",
    "articles",
    "books",
    "news",
    "general",
)

# Identifier formats the model must fill in so providers can disambiguate.
IDENTIFIER_SPECS: dict[str, str] = {
    "places": '{"address": "street address if known", "neighborhood": "district or area", "city": "city name"}',
    "movies": '{"year": 2024, "director": "director name"}',
    "music": '{"artist": "artist name", "album": "album name"}',
    "events": '{"venue": "venue name", "date": "YYYY-MM-DD", "city": "city name"}',
    "videos": '{"youtube_id": "11-char VIDEO_ID", "channel": "channel name"}',
    "articles": '{"source": "publication", "date": "YYYY-MM-DD"}',
    "books": '{"author": "author name", "year": 2001}',
    "news": '{"source": "publication", "date": "YYYY-MM-DD"}',
    "general": '{"category": "category"}',
}
GENERIC_IDENTIFIER_SPEC = IDENTIFIER_SPECS["general"]

# Hook names suggested to the model, in the order they should be tried.
DEFAULT_HOOKS: dict[str, list[str]] = {
    "places": ["google_places"],
    "movies": ["tmdb", "omdb"],
    "music": ["musicbrainz", "ticketmaster"],
    "events": ["ticketmaster"],
    "videos": ["youtube"],
    "articles": ["newsapi", "wikipedia"],
    "books": ["openlibrary"],
    "news": ["newsapi"],
    "general": ["wikipedia"],
}

SEARCH_HINT_GUIDANCE: dict[str, str] = {
    "places": (
        '"search_hint": "venue name + neighborhood or street" - MUST disambiguate from '
        "other nearby places. Only recommend places you are confident exist."
    ),
    "movies": '"search_hint": "exact movie title only" - no year, no extra words',
    "videos": '"search_hint": "video title" - the youtube_id in identifiers is required',
    "books": '"search_hint": "exact book title"',
}
DEFAULT_SEARCH_HINT_GUIDANCE = '"search_hint": "search query for external API"'

RESULT_TYPES: dict[str, str] = {
    "places": "entity",
    "movies": "entity",
    "music": "track",
    "events": "event",
    "videos": "video",
    "articles": "article",
    "books": "entity",
    "news": "article",
    "general": "entity",
}

DOMAIN_LABELS: dict[str, str] = {
    "places": "places",
    "movies": "movies",
    "music": "songs",
    "events": "events",
    "videos": "videos",
    "articles": "articles",
    "books": "books",
    "news": "stories",
    "general": "results",
}

# Payload domains whose results carry a publisher URL for source discovery.
URL_PAYLOAD_DOMAINS = ("articles", "news")

SKIP_UNVERIFIED = "unverified"
SKIP_NO_SUMMARY = "no summary"
