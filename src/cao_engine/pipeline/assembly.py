"""Turn verified candidates into API results and answer bundles."""

from __future__ import annotations

from cao_engine.config.constants import DOMAIN_LABELS, RESULT_TYPES
from cao_engine.models.domain import CandidatePersonalization, EnrichedCandidate
from cao_engine.models.schemas import (
    AnswerBundle,
    CAOResult,
    EnrichmentResult,
    PersonalizationBlock,
    PersonalizationNote,
)

SEPARATOR = " · "


def _year(date: str | None) -> str | None:
    return date[:4] if date else None


def build_subheader(enrichment: EnrichmentResult) -> str:
    """Compact one-line summary of the provider payload."""
    domain = enrichment.payload_domain
    payload = enrichment.payload
    if payload is None:
        return ""

    if domain == "places":
        parts = [
            f"{payload.rating:.1f}★" if payload.rating is not None else None,
            payload.price_level,
            "Open now" if payload.open_now else None,
        ]
    elif domain == "movies":
        parts = [payload.year, f"{payload.rating:.1f}/10" if payload.rating else None]
    elif domain == "music":
        parts = [payload.artist, payload.album]
    elif domain == "events":
        parts = [payload.venue, (payload.start_date or "")[:10] or None]
    elif domain == "videos":
        parts = [payload.channel_name, payload.duration]
    elif domain in ("articles", "news"):
        parts = [payload.source, (payload.published_at or "")[:10] or None]
    elif domain == "books":
        parts = [payload.author, str(payload.year) if payload.year else None]
    else:
        parts = []
    return SEPARATOR.join(p for p in parts if p)


def result_id(item: EnrichedCandidate, domain: str) -> str:
    canonical = item.enrichment.canonical
    if canonical is not None:
        return f"{item.enrichment.source or canonical.type}:{canonical.value}"
    return f"{domain}:{item.index}"


def to_cao_result(
    item: EnrichedCandidate,
    domain: str,
    summary: str,
    for_user: PersonalizationNote,
    personalization: CandidatePersonalization | None = None,
) -> CAOResult:
    if not item.verified:
        raise ValueError(f"refusing to build a result from unverified candidate {item.name!r}")
    return CAOResult(
        id=result_id(item, domain),
        type=RESULT_TYPES.get(domain, "entity"),
        name=item.name,
        subheader=build_subheader(item.enrichment),
        summary=summary,
        personalization=PersonalizationBlock(
            for_user=for_user,
            for_group=personalization.for_group if personalization else [],
            group_notes=personalization.group_notes if personalization else [],
        ),
        enrichment=item.enrichment,
    )


def build_answer_bundle(
    count: int,
    domain: str,
    query: str,
    headline: str | None = None,
    summary: str | None = None,
) -> AnswerBundle:
    if count == 0:
        return AnswerBundle(
            headline="No results found",
            summary="Unable to find matching results.",
            count=0,
        )
    label = DOMAIN_LABELS.get(domain, "results")
    return AnswerBundle(
        headline=headline or f"{count} {label} found",
        summary=summary or f'Found {count} verified {label} for "{query}"',
        count=count,
    )
