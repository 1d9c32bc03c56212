"""Search orchestrator: generation -> verification -> personalization.

Two flows share the same stages. ``search`` runs them as batches and returns
one response. ``stream`` pulls candidates lazily, processes a small window of
them concurrently and emits verified results in pull order, stopping as soon
as enough have been emitted.
"""

from __future__ import annotations

import asyncio
import json
import math
from collections import deque
from collections.abc import AsyncGenerator
from dataclasses import asdict

from cao_engine.config.constants import SKIP_NO_SUMMARY, SKIP_UNVERIFIED, URL_PAYLOAD_DOMAINS
from cao_engine.config.settings import Settings
from cao_engine.discovery.source_discovery import SourceDiscovery
from cao_engine.generation.candidate_generator import CandidateGenerator
from cao_engine.generation.personalizer import Personalizer, default_note
from cao_engine.models.domain import (
    CandidatePersonalization,
    EnrichedCandidate,
    RawCandidate,
    StreamOutcome,
    TemporalityResult,
    VerificationContext,
    VerificationStats,
)
from cao_engine.models.schemas import (
    SearchDebug,
    SearchRequest,
    SearchResponse,
    TemporalityInfo,
    VerificationDebug,
)
from cao_engine.observability.logger import get_logger
from cao_engine.observability.metrics import (
    log_generation_metrics,
    log_stream_metrics,
    log_verification_metrics,
)
from cao_engine.observability.tracing import TraceContext
from cao_engine.pipeline.assembly import build_answer_bundle, to_cao_result
from cao_engine.query.temporality import classify_temporality
from cao_engine.verification.executor import VerificationExecutor

logger = get_logger("orchestrator")


def _event(kind: str, payload) -> dict:
    data = payload if isinstance(payload, str) else json.dumps(payload)
    return {"event": kind, "data": data}


def _discard(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class SearchOrchestrator:
    def __init__(
        self,
        generator: CandidateGenerator,
        executor: VerificationExecutor,
        personalizer: Personalizer,
        settings: Settings,
        discovery: SourceDiscovery | None = None,
    ) -> None:
        self._generator = generator
        self._executor = executor
        self._personalizer = personalizer
        self._settings = settings
        self._discovery = discovery

    def _context(self, request: SearchRequest, trace: TraceContext) -> VerificationContext:
        return VerificationContext(
            timeout_ms=request.options.verification_timeout_ms,
            domain=request.query.domain,
            location_hint=request.logistics.search_location,
            request_id=trace.trace_id,
        )

    def _observe(self, item: EnrichedCandidate) -> bool:
        """Feed an article URL to source discovery; True when a sighting was recorded."""
        if self._discovery is None or item.enrichment.payload_domain not in URL_PAYLOAD_DOMAINS:
            return False
        payload = item.enrichment.payload
        return bool(
            payload.url
            and self._discovery.observe_url(
                payload.url, payload.title or item.name, payload.summary or ""
            )
        )

    def _observe_sources(self, verified: list[EnrichedCandidate]) -> None:
        observed = sum(1 for item in verified if self._observe(item))
        if observed:
            self._discovery.schedule_evaluation()

    # -- batch ---------------------------------------------------------------

    async def search(self, request: SearchRequest) -> SearchResponse:
        trace = TraceContext()
        query = request.query

        with trace.span("temporality"):
            temporality = classify_temporality(query.text, query.domain)

        with trace.span("generation"):
            candidates = await self._generator.generate(
                request, self._settings.max_candidates, temporality
            )
        log_generation_metrics(
            trace.trace_id, query.domain, temporality.type, temporality.use_grounding, len(candidates)
        )

        if not candidates:
            logger.info("search_empty", trace_id=trace.trace_id, domain=query.domain)
            stats = VerificationStats(0, 0, {}, 0.0)
            return SearchResponse(
                results=[],
                answer_bundle=build_answer_bundle(0, query.domain, query.text),
                debug=self._debug(trace, 0, stats, temporality) if request.options.include_debug else None,
            )

        with trace.span("verification_personalization"):
            (enriched, stats), batch = await asyncio.gather(
                self._executor.verify_all(candidates, self._context(request, trace)),
                self._personalizer.personalize(candidates, request),
            )
        log_verification_metrics(
            trace.trace_id,
            stats.candidates_processed,
            stats.candidates_verified,
            stats.hook_success_rates,
            stats.total_time_ms,
        )

        with trace.span("assembly"):
            kept: list[EnrichedCandidate] = []
            results = []
            for item in enriched:
                if not item.verified:
                    continue
                personalization = batch.by_index.get(item.index) or CandidatePersonalization(
                    summary="", for_user=default_note(request)
                )
                item.personalization = personalization
                kept.append(item)
                results.append(
                    to_cao_result(
                        item,
                        query.domain,
                        personalization.summary,
                        personalization.for_user,
                        personalization,
                    )
                )
                if len(results) >= request.options.max_results:
                    break

        self._observe_sources(kept)

        logger.info(
            "search_complete",
            trace_id=trace.trace_id,
            generated=len(candidates),
            verified=stats.candidates_verified,
            returned=len(results),
            latency_ms=round(trace.elapsed_ms, 2),
        )
        return SearchResponse(
            results=results,
            answer_bundle=build_answer_bundle(
                len(results), query.domain, query.text, batch.headline, batch.summary
            ),
            debug=self._debug(trace, len(candidates), stats, temporality)
            if request.options.include_debug
            else None,
        )

    def _debug(
        self,
        trace: TraceContext,
        generated: int,
        stats: VerificationStats,
        temporality: TemporalityResult,
    ) -> SearchDebug:
        timing = trace.timing()
        timing["verification"] = round(stats.total_time_ms, 2)
        return SearchDebug(
            trace_id=trace.trace_id,
            timing=timing,
            verification=VerificationDebug(
                candidates_generated=generated,
                candidates_verified=stats.candidates_verified,
                hook_success_rates=stats.hook_success_rates,
            ),
            temporality=TemporalityInfo(**asdict(temporality)),
        )

    # -- streaming -----------------------------------------------------------

    async def _process(
        self, candidate: RawCandidate, request: SearchRequest, context: VerificationContext
    ) -> StreamOutcome:
        enriched, summary, for_user = await asyncio.gather(
            self._executor.verify(candidate, context),
            self._personalizer.summarize(candidate, request),
            self._personalizer.for_user(candidate, request),
        )
        skip_reason = None
        if not enriched.verified:
            skip_reason = SKIP_UNVERIFIED
        elif not summary:
            skip_reason = SKIP_NO_SUMMARY
        return StreamOutcome(enriched=enriched, summary=summary, for_user=for_user, skip_reason=skip_reason)

    async def stream(self, request: SearchRequest) -> AsyncGenerator[dict, None]:
        """Yield SSE-ready dicts:
        - {"event": "candidate", "data": "<CAOResult json>"} per emitted result
        - {"event": "bundle", "data": "<AnswerBundle json>"}
        - {"event": "done", "data": "<counters json>"}
        - {"event": "error", "data": "<message json>"} instead of bundle/done on failure
        """
        trace = TraceContext()
        query = request.query
        target = request.options.max_results
        pull_limit = math.ceil(target * self._settings.stream_oversample_factor)
        window = max(1, self._settings.stream_window)
        context = self._context(request, trace)

        total = verified = skipped = emitted = 0
        skip_reasons: dict[str, int] = {}
        in_flight: deque[asyncio.Task] = deque()
        source = self._generator.stream(request, pull_limit)
        exhausted = False
        failure: Exception | None = None
        observed = 0
        outcome = "done"

        logger.info("stream_started", trace_id=trace.trace_id, target=target, pull_limit=pull_limit)
        try:
            while emitted < target:
                while not exhausted and len(in_flight) < window and total < pull_limit:
                    try:
                        candidate = await anext(source)
                    except StopAsyncIteration:
                        exhausted = True
                        break
                    except Exception as e:
                        # Candidates already pulled are still folded before the error surfaces.
                        failure = e
                        exhausted = True
                        logger.warning(
                            "candidate_source_failed",
                            trace_id=trace.trace_id,
                            pulled=total,
                            in_flight=len(in_flight),
                            error=str(e),
                        )
                        break
                    total += 1
                    in_flight.append(asyncio.create_task(self._process(candidate, request, context)))

                if not in_flight:
                    break

                result = await in_flight.popleft()
                if result.enriched.verified:
                    verified += 1
                if result.skip_reason:
                    skipped += 1
                    skip_reasons[result.skip_reason] = skip_reasons.get(result.skip_reason, 0) + 1
                    logger.info(
                        "stream_skip",
                        trace_id=trace.trace_id,
                        candidate=result.enriched.name,
                        reason=result.skip_reason,
                    )
                    continue

                emitted += 1
                cao = to_cao_result(result.enriched, query.domain, result.summary, result.for_user)
                observed += self._observe(result.enriched)
                yield _event("candidate", cao.model_dump_json())

            if failure is not None:
                raise failure

            bundle = build_answer_bundle(emitted, query.domain, query.text)
            yield _event("bundle", bundle.model_dump_json())
            yield _event(
                "done",
                {
                    "total_candidates": total,
                    "verified": verified,
                    "skipped": skipped,
                    "skip_reasons": skip_reasons,
                    "elapsed_ms": round(trace.elapsed_ms, 2),
                },
            )
        except Exception as e:
            outcome = "error"
            logger.error("stream_failed", trace_id=trace.trace_id, emitted=emitted, error=str(e))
            yield _event("error", {"message": str(e) or type(e).__name__})
        finally:
            # Results still in flight are discarded, not awaited.
            for task in in_flight:
                task.add_done_callback(_discard)
            await source.aclose()
            if observed:
                self._discovery.schedule_evaluation()
            log_stream_metrics(
                trace.trace_id, total, verified, skipped, skip_reasons, trace.elapsed_ms, outcome
            )
