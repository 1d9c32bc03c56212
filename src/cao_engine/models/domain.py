"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from cao_engine.models.schemas import (
    EnrichmentResult,
    GroupMemberNote,
    PersonalizationNote,
    SearchLocation,
)

HookStatus = Literal["verified", "unverified", "error", "timeout", "missing"]


@dataclass(frozen=True)
class TemporalityResult:
    type: str  # "current", "evergreen", "historical"
    confidence: str  # "high", "medium", "low"
    reason: str
    use_grounding: bool


@dataclass
class RawCandidate:
    index: int  # stable arena handle, assigned when the candidate is produced
    name: str
    identifiers: dict = field(default_factory=dict)
    search_hint: str | None = None
    hooks: list[str] = field(default_factory=list)

    @property
    def query(self) -> str:
        return self.search_hint or self.name


@dataclass
class HookOutcome:
    hook: str
    status: HookStatus
    elapsed_ms: float = 0.0
    reason: str | None = None
    result: EnrichmentResult | None = None


@dataclass
class CandidatePersonalization:
    summary: str
    for_user: PersonalizationNote
    for_group: list[GroupMemberNote] = field(default_factory=list)
    group_notes: list[str] = field(default_factory=list)


@dataclass
class EnrichedCandidate:
    candidate: RawCandidate
    enrichment: EnrichmentResult
    attempts: list[HookOutcome] = field(default_factory=list)
    personalization: CandidatePersonalization | None = None

    @property
    def verified(self) -> bool:
        return self.enrichment.verified

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def index(self) -> int:
        return self.candidate.index


@dataclass
class VerificationContext:
    timeout_ms: int
    domain: str = "general"
    location_hint: SearchLocation | None = None
    request_id: str = ""


@dataclass
class VerificationStats:
    candidates_processed: int
    candidates_verified: int
    hook_success_rates: dict[str, float]
    total_time_ms: float

    @property
    def verification_rate(self) -> float:
        if not self.candidates_processed:
            return 0.0
        return self.candidates_verified / self.candidates_processed


@dataclass
class PersonalizationBatch:
    by_index: dict[int, CandidatePersonalization]
    headline: str | None = None
    summary: str | None = None


@dataclass
class StreamOutcome:
    """Result of processing one streamed candidate; folded in pull order."""

    enriched: EnrichedCandidate
    summary: str
    for_user: PersonalizationNote
    skip_reason: str | None = None
