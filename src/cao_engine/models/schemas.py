"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Domain = Literal[
    "places", "movies", "music", "events", "videos", "articles", "books", "news", "general"
]

# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class QuerySpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    domain: Domain
    intent: str | None = None
    excludes: list[str] = Field(default_factory=list)


class CapsuleMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    preferences: dict[str, Any] = Field(default_factory=dict)


class PersonalizationCapsule(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["solo", "group"] = "solo"
    members: list[CapsuleMember] = Field(min_length=1)
    group_policy: str | None = None

    @property
    def primary(self) -> CapsuleMember:
        return self.members[0]


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class SearchLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str | None = None
    neighborhood: str | None = None
    coordinates: Coordinates | None = None
    radius: int | None = None


class TimeContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    local_time: str | None = None
    timezone: str | None = None
    date: str | None = None
    time_of_day: str | None = None


class PartyContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int | None = None
    composition: str | None = None
    has_children: bool | None = None


class ConstraintsContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    budget: Literal["$", "$$", "$$$", "$$$$"] | None = None
    accessibility: list[str] = Field(default_factory=list)
    transportation: str | None = None
    max_travel_time: int | None = None


class LogisticsContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: TimeContext | None = None
    search_location: SearchLocation | None = None
    party: PartyContext | None = None
    constraints: ConstraintsContext | None = None
    occasion: str | None = None


class ConversationMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: str
    content: str
    is_agent: bool = False


class ConversationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    recent_messages: list[ConversationMessage] = Field(default_factory=list)
    previous_searches: list[str] = Field(default_factory=list)
    corrections: list[str] = Field(default_factory=list)


class SearchOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_results: int = Field(default=12, ge=1, le=50)
    include_debug: bool = False
    verification_timeout_ms: int = Field(default=2000, ge=100, le=30000)


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: QuerySpec
    capsule: PersonalizationCapsule
    logistics: LogisticsContext = Field(default_factory=LogisticsContext)
    conversation: ConversationContext | None = None
    options: SearchOptions = Field(default_factory=SearchOptions)


# ---------------------------------------------------------------------------
# Enrichment payloads
# ---------------------------------------------------------------------------


class CanonicalId(BaseModel):
    type: str
    value: str


class Review(BaseModel):
    rating: float
    text: str
    author: str


class PlacesEnrichment(BaseModel):
    rating: float | None = None
    review_count: int | None = None
    price_level: str | None = None
    open_now: bool | None = None
    hours: list[str] = Field(default_factory=list)
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    google_maps_url: str | None = None
    location: Coordinates | None = None
    photos: list[str] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)


class CastMember(BaseModel):
    name: str
    character: str = ""


class MoviesEnrichment(BaseModel):
    rating: float | None = None
    year: str | None = None
    runtime: int | None = None
    genres: list[str] = Field(default_factory=list)
    poster_url: str | None = None
    backdrop_url: str | None = None
    overview: str | None = None
    cast: list[CastMember] = Field(default_factory=list)
    director: str | None = None
    imdb_id: str | None = None


class MusicEnrichment(BaseModel):
    artist: str | None = None
    album: str | None = None
    duration_ms: int | None = None
    genres: list[str] = Field(default_factory=list)
    release_date: str | None = None


class EventsEnrichment(BaseModel):
    venue: str | None = None
    venue_address: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    ticket_url: str | None = None
    price_range: str | None = None
    image_url: str | None = None
    status: str | None = None


class VideosEnrichment(BaseModel):
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    duration: str | None = None
    view_count: int | None = None
    like_count: int | None = None
    published_at: str | None = None
    channel_name: str | None = None
    channel_id: str | None = None
    video_url: str | None = None


class ArticlesEnrichment(BaseModel):
    title: str | None = None
    author: str | None = None
    published_at: str | None = None
    source: str | None = None
    image_url: str | None = None
    url: str | None = None
    summary: str | None = None


class BooksEnrichment(BaseModel):
    title: str | None = None
    author: str | None = None
    publisher: str | None = None
    year: int | None = None
    page_count: int | None = None
    cover_url: str | None = None
    isbn: str | None = None
    open_library_url: str | None = None
    subjects: list[str] = Field(default_factory=list)


class NewsEnrichment(ArticlesEnrichment):
    pass


class GeneralEnrichment(BaseModel):
    summary: str | None = None
    thumbnail: str | None = None
    wikipedia_url: str | None = None


PAYLOAD_FIELDS = (
    "places", "movies", "music", "events", "videos", "articles", "books", "news", "general"
)


class EnrichmentResult(BaseModel):
    verified: bool
    source: str | None = None
    canonical: CanonicalId | None = None
    places: PlacesEnrichment | None = None
    movies: MoviesEnrichment | None = None
    music: MusicEnrichment | None = None
    events: EventsEnrichment | None = None
    videos: VideosEnrichment | None = None
    articles: ArticlesEnrichment | None = None
    books: BooksEnrichment | None = None
    news: NewsEnrichment | None = None
    general: GeneralEnrichment | None = None

    @model_validator(mode="after")
    def _one_payload(self) -> EnrichmentResult:
        populated = [f for f in PAYLOAD_FIELDS if getattr(self, f) is not None]
        if not self.verified and populated:
            raise ValueError("unverified enrichment must not carry a payload")
        if len(populated) > 1:
            raise ValueError(f"exactly one payload allowed, got {populated}")
        if self.verified and not populated:
            raise ValueError("verified enrichment must carry a payload")
        return self

    @property
    def payload_domain(self) -> str | None:
        for f in PAYLOAD_FIELDS:
            if getattr(self, f) is not None:
                return f
        return None

    @property
    def payload(self) -> BaseModel | None:
        domain = self.payload_domain
        return getattr(self, domain) if domain else None

    @classmethod
    def unverified(cls) -> EnrichmentResult:
        return cls(verified=False)


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class PersonalizationNote(BaseModel):
    text: str
    basis: Literal["capsule", "evidence", "inference"] = "capsule"
    confidence: Literal["high", "medium", "low"] = "medium"


class GroupMemberNote(BaseModel):
    member_id: str
    member_name: str
    note: PersonalizationNote


class PersonalizationBlock(BaseModel):
    for_user: PersonalizationNote | None = None
    for_group: list[GroupMemberNote] = Field(default_factory=list)
    group_notes: list[str] = Field(default_factory=list)


class CAOResult(BaseModel):
    id: str
    type: Literal["entity", "article", "video", "track", "event"]
    name: str
    subheader: str = ""
    summary: str = ""
    personalization: PersonalizationBlock
    enrichment: EnrichmentResult
    facet_scores: dict[str, float] | None = None


class AnswerBundle(BaseModel):
    headline: str
    summary: str
    count: int


class TemporalityInfo(BaseModel):
    type: Literal["current", "evergreen", "historical"]
    confidence: Literal["high", "medium", "low"]
    reason: str
    use_grounding: bool


class VerificationDebug(BaseModel):
    candidates_generated: int
    candidates_verified: int
    hook_success_rates: dict[str, float]


class SearchDebug(BaseModel):
    trace_id: str
    timing: dict[str, float]
    verification: VerificationDebug
    temporality: TemporalityInfo


class SearchResponse(BaseModel):
    results: list[CAOResult]
    answer_bundle: AnswerBundle
    debug: SearchDebug | None = None


class HealthResponse(BaseModel):
    status: str
    hooks: list[str]
    pending_sources: int
