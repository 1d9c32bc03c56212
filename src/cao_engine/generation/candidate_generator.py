"""Stage A: ask the completion service for candidate entities."""

from __future__ import annotations

import json
import re
from collections.abc import AsyncIterator

from cao_engine.config.constants import (
    DEFAULT_HOOKS,
    DEFAULT_SEARCH_HINT_GUIDANCE,
    GENERIC_IDENTIFIER_SPEC,
    IDENTIFIER_SPECS,
    SEARCH_HINT_GUIDANCE,
)
from cao_engine.config.settings import Settings
from cao_engine.exceptions import CAOEngineError
from cao_engine.generation.json_extract import extract_json
from cao_engine.generation.prompt_templates import (
    CANDIDATE_PROMPT,
    CANDIDATE_STREAM_PROMPT,
    CANDIDATE_SYSTEM,
    VIDEO_SEARCH_PROMPT,
    format_context_block,
    format_location,
)
from cao_engine.models.domain import RawCandidate, TemporalityResult
from cao_engine.models.schemas import SearchRequest
from cao_engine.observability.logger import get_logger
from cao_engine.protocols.llm import GenerationMode
from cao_engine.query.temporality import classify_temporality

logger = get_logger("candidate_generator")

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/)([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
)
QUOTED_TITLE_PATTERN = re.compile(r'"([^"]+)"')


def parse_candidates(text: str) -> list[dict]:
    """Pull the raw candidate dicts out of a completion.

    Accepts a bare array or an object wrapping it under "candidates".
    """
    parsed = extract_json(text, prefer="array")
    if isinstance(parsed, dict):
        parsed = parsed.get("candidates")
    if not isinstance(parsed, list):
        return []
    return [item for item in parsed if isinstance(item, dict)]


def parse_ndjson_line(line: str) -> dict | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("```"):
        return None
    try:
        parsed = json.loads(stripped.rstrip(","))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def to_raw_candidate(item: dict, index: int, domain: str) -> RawCandidate | None:
    """Normalize one parsed item; items without a usable name are dropped."""
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        return None

    identifiers = item.get("identifiers")
    if not isinstance(identifiers, dict):
        identifiers = {}

    hint = item.get("search_hint")
    hint = hint.strip() if isinstance(hint, str) and hint.strip() else None

    hooks = item.get("enrichment_hooks")
    if isinstance(hooks, list):
        hooks = [h for h in hooks if isinstance(h, str) and h]
    else:
        hooks = []
    if not hooks:
        hooks = list(DEFAULT_HOOKS.get(domain, DEFAULT_HOOKS["general"]))

    return RawCandidate(
        index=index,
        name=name.strip(),
        identifiers=identifiers,
        search_hint=hint,
        hooks=hooks,
    )


def video_candidates(text: str, query: str, target_count: int) -> list[RawCandidate]:
    """Build video candidates from the YouTube links found in a grounded answer.

    Ids are deduplicated in order of appearance. The title is the quoted text
    on the same line, when there is one.
    """
    candidates: list[RawCandidate] = []
    seen: set[str] = set()
    for line in text.splitlines():
        for match in YOUTUBE_ID_PATTERN.finditer(line):
            video_id = match.group(1)
            if video_id in seen:
                continue
            seen.add(video_id)
            title = QUOTED_TITLE_PATTERN.search(line)
            title = title.group(1).strip() if title else ""
            candidates.append(
                RawCandidate(
                    index=len(candidates),
                    name=title or f"Video {len(candidates) + 1}",
                    identifiers={"youtube_id": video_id},
                    search_hint=title or query,
                    hooks=["youtube"],
                )
            )
            if len(candidates) >= target_count:
                return candidates
    return candidates


class CandidateGenerator:
    def __init__(self, llm, settings: Settings) -> None:
        self._llm = llm
        self._settings = settings

    def build_prompt(self, request: SearchRequest, target_count: int, streaming: bool = False) -> str:
        query = request.query
        domain = query.domain
        hooks = DEFAULT_HOOKS.get(domain, DEFAULT_HOOKS["general"])

        intent_block = f"\nIntent: {query.intent}" if query.intent else ""
        excludes_block = ""
        if query.excludes:
            excludes_block = "\nExclude (do NOT recommend): " + ", ".join(query.excludes)

        fields = dict(
            count=target_count,
            query=query.text,
            domain=domain,
            intent_block=intent_block,
            excludes_block=excludes_block,
            location=format_location(request.logistics),
            context_block=format_context_block(
                request.conversation, self._settings.conversation_context_turns
            ),
            identifier_spec=IDENTIFIER_SPECS.get(domain, GENERIC_IDENTIFIER_SPEC),
            hooks=json.dumps(hooks),
        )
        if streaming:
            return CANDIDATE_STREAM_PROMPT.format(**fields)
        return CANDIDATE_PROMPT.format(
            search_hint_guidance=SEARCH_HINT_GUIDANCE.get(domain, DEFAULT_SEARCH_HINT_GUIDANCE),
            **fields,
        )

    def build_video_prompt(self, request: SearchRequest, target_count: int) -> str:
        query = request.query
        return VIDEO_SEARCH_PROMPT.format(
            count=target_count,
            query=query.text,
            intent_block=f"\nIntent: {query.intent}" if query.intent else "",
            excludes_block=(
                "\nExclude (do NOT recommend): " + ", ".join(query.excludes) if query.excludes else ""
            ),
            context_block=format_context_block(
                request.conversation, self._settings.conversation_context_turns
            ),
        )

    async def search_videos(self, request: SearchRequest, target_count: int) -> list[RawCandidate]:
        """Grounded web search for YouTube videos. Never raises."""
        prompt = self.build_video_prompt(request, target_count)
        try:
            text = await self._llm.generate(prompt, mode=GenerationMode.GROUNDED)
        except CAOEngineError as e:
            logger.error("video_search_failed", error=str(e))
            return []

        candidates = video_candidates(text, request.query.text, target_count)
        logger.info("video_candidates_generated", kept=len(candidates), response_len=len(text))
        return candidates

    async def generate(
        self,
        request: SearchRequest,
        target_count: int,
        temporality: TemporalityResult | None = None,
    ) -> list[RawCandidate]:
        """Generate up to ``target_count`` candidates. Never raises."""
        domain = request.query.domain
        if domain == "videos":
            return await self.search_videos(request, target_count)
        if temporality is None:
            temporality = classify_temporality(request.query.text, domain)

        # Grounded completions cannot be constrained to JSON output.
        mode = GenerationMode.GROUNDED if temporality.use_grounding else GenerationMode.STRICT_JSON
        prompt = self.build_prompt(request, target_count)

        try:
            text = await self._llm.generate(prompt, system=CANDIDATE_SYSTEM, mode=mode)
        except CAOEngineError as e:
            logger.error("candidate_generation_failed", domain=domain, error=str(e))
            return []

        items = parse_candidates(text)
        if not items:
            logger.warning("candidate_parse_failed", domain=domain, response_len=len(text))
            return []

        candidates: list[RawCandidate] = []
        for item in items:
            candidate = to_raw_candidate(item, len(candidates), domain)
            if candidate is not None:
                candidates.append(candidate)
            if len(candidates) >= target_count:
                break

        logger.info(
            "candidates_generated",
            domain=domain,
            mode=mode.value,
            parsed=len(items),
            kept=len(candidates),
        )
        return candidates

    async def stream(self, request: SearchRequest, target_count: int) -> AsyncIterator[RawCandidate]:
        """Yield candidates one at a time as complete NDJSON lines arrive.

        The consumer stops generation by ceasing to pull. Completion errors
        propagate to the consumer.
        """
        domain = request.query.domain
        if domain == "videos":
            for candidate in await self.search_videos(request, target_count):
                yield candidate
            return

        temporality = classify_temporality(request.query.text, domain)
        mode = GenerationMode.GROUNDED if temporality.use_grounding else GenerationMode.TEXT
        prompt = self.build_prompt(request, target_count, streaming=True)

        logger.info("candidate_stream_started", domain=domain, temporality=temporality.type)

        produced = 0
        buffer = ""
        async for chunk in self._llm.generate_stream(prompt, system=CANDIDATE_SYSTEM, mode=mode):
            buffer += chunk
            *lines, buffer = buffer.split("\n")
            for line in lines:
                item = parse_ndjson_line(line)
                candidate = to_raw_candidate(item, produced, domain) if item else None
                if candidate is None:
                    continue
                produced += 1
                yield candidate
                if produced >= target_count:
                    logger.info("candidate_stream_complete", produced=produced)
                    return

        item = parse_ndjson_line(buffer)
        candidate = to_raw_candidate(item, produced, domain) if item else None
        if candidate is not None and produced < target_count:
            produced += 1
            yield candidate
        logger.info("candidate_stream_complete", produced=produced)
