"""Verification executor: try a candidate's hooks in order until one verifies it."""

from __future__ import annotations

import asyncio
import time

from cao_engine.models.domain import (
    EnrichedCandidate,
    HookOutcome,
    RawCandidate,
    VerificationContext,
    VerificationStats,
)
from cao_engine.models.schemas import EnrichmentResult
from cao_engine.observability.logger import get_logger
from cao_engine.verification.registry import HookRegistry

logger = get_logger("verification")


def _consume_result(task: asyncio.Task) -> None:
    # A timed-out provider call keeps running; retrieve its outcome so a late
    # failure is not reported as never retrieved.
    if not task.cancelled():
        task.exception()


async def race_timeout(coro, timeout_ms: int):
    """Await ``coro`` for at most ``timeout_ms``.

    Raises TimeoutError when the timer wins. The underlying task is not
    cancelled; it finishes in the background and its result is ignored.
    """
    task = asyncio.ensure_future(coro)
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    if not done:
        task.add_done_callback(_consume_result)
        raise TimeoutError(f"timed out after {timeout_ms}ms")
    return task.result()


class VerificationExecutor:
    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> HookRegistry:
        return self._registry

    async def _attempt(
        self, hook_name: str, candidate: RawCandidate, context: VerificationContext
    ) -> HookOutcome:
        hook = self._registry.get(hook_name)
        if hook is None:
            logger.warning("hook_missing", hook=hook_name, candidate=candidate.name)
            return HookOutcome(hook=hook_name, status="missing", reason="not registered")

        start = time.monotonic()
        try:
            result = await race_timeout(hook.enrich(candidate, context), context.timeout_ms)
        except TimeoutError as e:
            outcome = HookOutcome(hook=hook_name, status="timeout", reason=str(e))
        except Exception as e:
            outcome = HookOutcome(hook=hook_name, status="error", reason=str(e))
        else:
            if result is not None and result.verified:
                outcome = HookOutcome(hook=hook_name, status="verified", result=result)
            else:
                outcome = HookOutcome(hook=hook_name, status="unverified", reason="no match")
        outcome.elapsed_ms = (time.monotonic() - start) * 1000

        if outcome.status in ("timeout", "error"):
            logger.warning(
                "hook_failed",
                hook=hook_name,
                candidate=candidate.name,
                status=outcome.status,
                reason=outcome.reason,
                request_id=context.request_id,
            )
        return outcome

    async def verify(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichedCandidate:
        """Verify one candidate. Never raises; exhaustion yields verified=False."""
        attempts: list[HookOutcome] = []
        for hook_name in candidate.hooks:
            outcome = await self._attempt(hook_name, candidate, context)
            attempts.append(outcome)
            if outcome.status == "verified":
                logger.debug("candidate_verified", candidate=candidate.name, hook=hook_name)
                return EnrichedCandidate(
                    candidate=candidate, enrichment=outcome.result, attempts=attempts
                )

        logger.info(
            "candidate_unverified",
            candidate=candidate.name,
            tried=[a.hook for a in attempts],
        )
        return EnrichedCandidate(
            candidate=candidate, enrichment=EnrichmentResult.unverified(), attempts=attempts
        )

    async def verify_all(
        self, candidates: list[RawCandidate], context: VerificationContext
    ) -> tuple[list[EnrichedCandidate], VerificationStats]:
        start = time.monotonic()
        enriched = list(await asyncio.gather(*(self.verify(c, context) for c in candidates)))

        counts: dict[str, list[int]] = {}
        for item in enriched:
            for attempt in item.attempts:
                if attempt.status == "missing":
                    continue
                success_total = counts.setdefault(attempt.hook, [0, 0])
                success_total[1] += 1
                if attempt.status == "verified":
                    success_total[0] += 1

        stats = VerificationStats(
            candidates_processed=len(candidates),
            candidates_verified=sum(1 for e in enriched if e.verified),
            hook_success_rates={
                name: success / total for name, (success, total) in counts.items()
            },
            total_time_ms=(time.monotonic() - start) * 1000,
        )
        return enriched, stats
