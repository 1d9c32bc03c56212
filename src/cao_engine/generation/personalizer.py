"""Stage C: summaries and personal notes for candidates."""

from __future__ import annotations

import json
from typing import Any

from cao_engine.config.settings import Settings
from cao_engine.exceptions import CAOEngineError
from cao_engine.generation.json_extract import extract_object
from cao_engine.generation.prompt_templates import (
    DOMAIN_GUIDANCE,
    FOR_USER_GUIDANCE,
    FOR_USER_PROMPT,
    GROUP_BLOCK,
    PERSONALIZE_BATCH_PROMPT,
    SUMMARY_PROMPT,
    format_preferences,
)
from cao_engine.models.domain import (
    CandidatePersonalization,
    PersonalizationBatch,
    RawCandidate,
)
from cao_engine.models.schemas import GroupMemberNote, PersonalizationNote, SearchRequest
from cao_engine.observability.logger import get_logger
from cao_engine.protocols.llm import GenerationMode

logger = get_logger("personalizer")


def match_response_entry(name: str, response: dict[str, Any], requested_count: int) -> Any | None:
    """Find the response entry the model wrote for ``name``.

    The model rewrites names ("The Grand Cafe" vs "Grand Cafe"), so after an
    exact key lookup fall back to a case-insensitive substring match in either
    direction, then to the lone entry when exactly one candidate was asked for.
    """
    if name in response:
        return response[name]

    lowered = name.lower()
    for key, value in response.items():
        key_lower = key.lower()
        if key_lower in lowered or lowered in key_lower:
            return value

    if len(response) == 1 and requested_count == 1:
        return next(iter(response.values()))
    return None


def default_note(request: SearchRequest) -> PersonalizationNote:
    return PersonalizationNote(text=f"Recommended for {request.capsule.primary.name}")


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class Personalizer:
    def __init__(self, llm, settings: Settings) -> None:
        self._llm = llm
        self._settings = settings

    def _default(self, request: SearchRequest) -> CandidatePersonalization:
        return CandidatePersonalization(summary="", for_user=default_note(request))

    def _from_entry(self, entry: Any, request: SearchRequest) -> CandidatePersonalization:
        if isinstance(entry, str):
            text = entry.strip()
            return CandidatePersonalization(
                summary="",
                for_user=PersonalizationNote(text=text) if text else default_note(request),
            )
        if not isinstance(entry, dict):
            return self._default(request)

        for_user_text = _text(entry.get("forUser"))
        for_user = PersonalizationNote(text=for_user_text) if for_user_text else default_note(request)

        for_group: list[GroupMemberNote] = []
        group_entry = entry.get("forGroup")
        if request.capsule.mode == "group" and isinstance(group_entry, dict):
            for member in request.capsule.members:
                note = _text(group_entry.get(member.id))
                if note:
                    for_group.append(
                        GroupMemberNote(
                            member_id=member.id,
                            member_name=member.name,
                            note=PersonalizationNote(text=note),
                        )
                    )

        group_notes = entry.get("groupNotes")
        if not isinstance(group_notes, list):
            group_notes = []

        return CandidatePersonalization(
            summary=_text(entry.get("summary")),
            for_user=for_user,
            for_group=for_group,
            group_notes=[n for n in group_notes if isinstance(n, str) and n],
        )

    async def personalize(
        self, candidates: list[RawCandidate], request: SearchRequest
    ) -> PersonalizationBatch:
        """One completion call for the whole batch, keyed by arena index."""
        if not candidates:
            return PersonalizationBatch(by_index={})

        capsule = request.capsule
        domain = request.query.domain
        group = capsule.mode == "group"
        prompt = PERSONALIZE_BATCH_PROMPT.format(
            query=request.query.text,
            domain=domain,
            names=json.dumps([c.name for c in candidates]),
            guidance=DOMAIN_GUIDANCE.get(domain, DOMAIN_GUIDANCE["general"]),
            user_name=capsule.primary.name,
            for_user_guidance=FOR_USER_GUIDANCE.get(domain, FOR_USER_GUIDANCE["general"]),
            group_block=GROUP_BLOCK.format(
                policy=capsule.group_policy or "balance everyone's preferences",
                member_ids=", ".join(m.id for m in capsule.members),
            )
            if group
            else "",
            preferences=format_preferences(capsule.members, domain),
            group_fields=', "forGroup": {"memberId": "..."}, "groupNotes": ["..."]' if group else "",
        )

        parsed: dict | None = None
        try:
            text = await self._llm.generate(prompt, mode=GenerationMode.STRICT_JSON)
            parsed = extract_object(text)
        except CAOEngineError as e:
            logger.error("personalization_failed", candidates=len(candidates), error=str(e))

        entries = parsed.get("personalizations") if parsed else None
        if not isinstance(entries, dict):
            entries = {}
            logger.warning("personalization_parse_failed", candidates=len(candidates))

        by_index: dict[int, CandidatePersonalization] = {}
        matched = 0
        for candidate in candidates:
            entry = match_response_entry(candidate.name, entries, len(candidates))
            if entry is None:
                by_index[candidate.index] = self._default(request)
            else:
                matched += 1
                by_index[candidate.index] = self._from_entry(entry, request)

        headline = summary = None
        bundle = parsed.get("answerBundle") if parsed else None
        if isinstance(bundle, dict):
            headline = _text(bundle.get("headline")) or None
            summary = _text(bundle.get("summary")) or None

        logger.info("personalization_complete", candidates=len(candidates), matched=matched)
        return PersonalizationBatch(by_index=by_index, headline=headline, summary=summary)

    async def summarize(self, candidate: RawCandidate, request: SearchRequest) -> str:
        """Single-candidate summary for the streaming flow; "" when unavailable."""
        domain = request.query.domain
        prompt = SUMMARY_PROMPT.format(
            query=request.query.text,
            name=candidate.name,
            guidance=DOMAIN_GUIDANCE.get(domain, DOMAIN_GUIDANCE["general"]),
        )
        try:
            text = await self._llm.generate(
                prompt,
                max_tokens=self._settings.personalization_max_tokens,
                mode=GenerationMode.STRICT_JSON,
            )
        except CAOEngineError as e:
            logger.warning("summary_failed", candidate=candidate.name, error=str(e))
            return ""

        parsed = extract_object(text) or {}
        summaries = parsed.get("summaries")
        if not isinstance(summaries, dict):
            return ""
        return _text(match_response_entry(candidate.name, summaries, 1))

    async def for_user(self, candidate: RawCandidate, request: SearchRequest) -> PersonalizationNote:
        domain = request.query.domain
        primary = request.capsule.primary
        prompt = FOR_USER_PROMPT.format(
            for_user_guidance=FOR_USER_GUIDANCE.get(domain, FOR_USER_GUIDANCE["general"]),
            name=candidate.name,
            user_name=primary.name,
            query=request.query.text,
            preferences=json.dumps(primary.preferences.get(domain, primary.preferences), sort_keys=True),
        )
        try:
            text = await self._llm.generate(
                prompt,
                max_tokens=self._settings.personalization_max_tokens,
                mode=GenerationMode.STRICT_JSON,
            )
        except CAOEngineError as e:
            logger.warning("for_user_failed", candidate=candidate.name, error=str(e))
            return default_note(request)

        parsed = extract_object(text) or {}
        entries = parsed.get("personalizations")
        if not isinstance(entries, dict):
            return default_note(request)
        note = _text(match_response_entry(candidate.name, entries, 1))
        return PersonalizationNote(text=note) if note else default_note(request)
