"""Source discovery: promote frequently seen publisher domains into a trust registry.

Unknown domains accumulate sightings from verified results. Once a domain has
enough sightings it is scored by the completion service against a fixed
8-criterion rubric and compared with its category's top-quartile threshold.
The whole document is loaded once and written back whole after each run.
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime, timezone
from urllib.parse import urlparse

from cao_engine.config.settings import Settings
from cao_engine.exceptions import CAOEngineError, DiscoveryError
from cao_engine.generation.json_extract import extract_object
from cao_engine.generation.prompt_templates import SOURCE_SCORING_PROMPT, format_sightings
from cao_engine.observability.logger import get_logger
from cao_engine.protocols.llm import GenerationMode
from cao_engine.storage.sqlite_document_store import SQLiteDocumentStore

logger = get_logger("source_discovery")

DISCOVERY_KEY = "source_discovery"
TRUSTED_KEY = "trusted_sources"

RUBRIC = (
    "impartiality",
    "accuracy",
    "depth",
    "expertise",
    "globalPerspective",
    "clarity",
    "transparency",
    "timeliness",
)
CATEGORIES = frozenset({"general", "specialty", "regional", "wire"})
TITLE_LIMIT = 200
SNIPPET_LIMIT = 300
SCORE_MIN, SCORE_MAX = 1, 10


def quartile_threshold(scores: list[float], default: float = 5.0, min_samples: int = 4) -> float:
    """Top-quartile cut of previously observed scores.

    Ascending sort, value at index floor(0.75 * n); ``default`` until
    ``min_samples`` scores exist.
    """
    if len(scores) < min_samples:
        return default
    ordered = sorted(scores)
    return ordered[math.floor(0.75 * len(ordered))]


def domain_of(url: str) -> str | None:
    host = urlparse(url).hostname or ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host or None


def _valid_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and SCORE_MIN <= value <= SCORE_MAX


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _empty_document() -> dict:
    return {"version": 1, "candidates": {}, "evaluated": {}, "category_scores": {}}


class SourceDiscovery:
    def __init__(self, llm, store: SQLiteDocumentStore, settings: Settings) -> None:
        self._llm = llm
        self._store = store
        self._settings = settings
        self._data: dict = _empty_document()
        self._trusted: dict[str, dict] = {}
        self._dirty = False
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    async def initialize(self) -> None:
        await self._store.initialize()
        data = await self._store.get(DISCOVERY_KEY) or _empty_document()
        trusted = await self._store.get(TRUSTED_KEY) or {}
        if not isinstance(data, dict) or not all(
            isinstance(data.get(k), dict) for k in ("candidates", "evaluated", "category_scores")
        ):
            raise DiscoveryError(f"Malformed {DISCOVERY_KEY} document in {self._store.db_path}")
        if not isinstance(trusted, dict):
            raise DiscoveryError(f"Malformed {TRUSTED_KEY} document in {self._store.db_path}")
        self._data = data
        self._trusted = trusted
        logger.info(
            "discovery_loaded",
            candidates=len(self._data["candidates"]),
            evaluated=len(self._data["evaluated"]),
            trusted=len(self._trusted),
        )

    async def save(self) -> None:
        if not self._dirty:
            return
        await self._store.put_many({DISCOVERY_KEY: self._data, TRUSTED_KEY: self._trusted})
        self._dirty = False

    # -- sightings -----------------------------------------------------------

    def record_sighting(self, domain: str, title: str, snippet: str, url: str) -> None:
        if domain in self._data["evaluated"] or domain in self._trusted:
            return

        now = _now()
        candidate = self._data["candidates"].setdefault(
            domain, {"domain": domain, "sightings": [], "first_seen": now, "last_seen": now}
        )
        candidate["last_seen"] = now
        self._dirty = True

        if any(s["url"] == url for s in candidate["sightings"]):
            return
        candidate["sightings"].append(
            {
                "title": (title or "")[:TITLE_LIMIT],
                "snippet": (snippet or "")[:SNIPPET_LIMIT],
                "url": url,
                "date": now,
            }
        )
        candidate["sightings"] = candidate["sightings"][-self._settings.discovery_max_sightings :]

    def observe_url(self, url: str, title: str = "", snippet: str = "") -> str | None:
        """Record a sighting for the publisher of ``url``; returns its domain."""
        domain = domain_of(url) if url else None
        if domain is None:
            return None
        self.record_sighting(domain, title, snippet, url)
        return domain

    def pending_count(self) -> int:
        return sum(
            1
            for c in self._data["candidates"].values()
            if len(c["sightings"]) >= self._settings.discovery_min_sightings
        )

    def trusted_sources(self) -> dict[str, dict]:
        return dict(self._trusted)

    def is_trusted(self, domain: str) -> bool:
        return domain in self._trusted

    def evaluation(self, domain: str) -> dict | None:
        return self._data["evaluated"].get(domain)

    # -- evaluation ----------------------------------------------------------

    async def _score(self, candidate: dict) -> dict | None:
        prompt = SOURCE_SCORING_PROMPT.format(
            domain=candidate["domain"], articles=format_sightings(candidate["sightings"])
        )
        try:
            text = await self._llm.generate(prompt, mode=GenerationMode.STRICT_JSON)
        except CAOEngineError as e:
            logger.warning("source_scoring_failed", domain=candidate["domain"], error=str(e))
            return None

        parsed = extract_object(text)
        scores = parsed.get("scores") if parsed else None
        if not isinstance(scores, dict) or not all(_valid_score(scores.get(k)) for k in RUBRIC):
            logger.warning("source_score_parse_failed", domain=candidate["domain"])
            return None

        category = parsed.get("category")
        return {
            "domain": candidate["domain"],
            "scores": {k: scores[k] for k in RUBRIC},
            "average_score": sum(scores[k] for k in RUBRIC) / len(RUBRIC),
            "category": category if category in CATEGORIES else "general",
            "suggested_tier": parsed.get("suggestedTier") or 3,
            "region": parsed.get("region") or "Unknown",
            "paywall": parsed.get("paywall") or "free",
            "specialty": parsed.get("specialty") or None,
            "display_name": parsed.get("displayName") or candidate["domain"],
            "reasoning": parsed.get("reasoning") or "",
        }

    async def evaluate_candidates(self) -> dict[str, dict]:
        """Score up to the per-run cap of eligible domains; returns newly promoted entries."""
        async with self._lock:
            ready = [
                c
                for c in self._data["candidates"].values()
                if len(c["sightings"]) >= self._settings.discovery_min_sightings
            ][: self._settings.discovery_max_evaluations_per_run]
            if not ready:
                return {}

            promoted: dict[str, dict] = {}
            for candidate in ready:
                domain = candidate["domain"]
                score = await self._score(candidate)
                if score is None:
                    continue

                history = self._data["category_scores"].setdefault(score["category"], [])
                threshold = quartile_threshold(
                    history,
                    default=self._settings.discovery_default_threshold,
                    min_samples=self._settings.discovery_min_scores_for_quartile,
                )
                passes = score["average_score"] >= threshold
                history.append(score["average_score"])

                self._data["evaluated"][domain] = {
                    "score": score,
                    "threshold": threshold,
                    "promoted": passes,
                    "evaluated_at": _now(),
                }
                del self._data["candidates"][domain]
                self._dirty = True

                if passes:
                    entry = {
                        "display_name": score["display_name"],
                        "tier": score["suggested_tier"],
                        "region": score["region"],
                        "paywall": score["paywall"],
                    }
                    if score["specialty"]:
                        entry["specialty"] = score["specialty"]
                    self._trusted[domain] = entry
                    promoted[domain] = entry

                logger.info(
                    "source_evaluated",
                    domain=domain,
                    category=score["category"],
                    score=round(score["average_score"], 2),
                    threshold=threshold,
                    promoted=passes,
                )

            await self.save()
            return promoted

    def schedule_evaluation(self) -> asyncio.Task | None:
        """Fire-and-forget evaluation run; None when nothing is eligible."""
        if not self.pending_count():
            return None
        task = asyncio.create_task(self._run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self) -> None:
        try:
            await self.evaluate_candidates()
        except Exception as e:
            logger.error("discovery_run_failed", error=str(e))

    async def aclose(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.save()
