"""Metric recording helpers for traces."""

from __future__ import annotations

from cao_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_generation_metrics(
    trace_id: str,
    domain: str,
    temporality: str,
    grounded: bool,
    num_candidates: int,
) -> None:
    logger.info(
        "generation_metrics",
        trace_id=trace_id,
        domain=domain,
        temporality=temporality,
        grounded=grounded,
        num_candidates=num_candidates,
    )


def log_verification_metrics(
    trace_id: str,
    processed: int,
    verified: int,
    hook_success_rates: dict[str, float],
    elapsed_ms: float,
) -> None:
    logger.info(
        "verification_metrics",
        trace_id=trace_id,
        processed=processed,
        verified=verified,
        verification_rate=round(verified / processed, 4) if processed else 0.0,
        hook_success_rates={k: round(v, 4) for k, v in hook_success_rates.items()},
        elapsed_ms=round(elapsed_ms, 2),
    )


def log_stream_metrics(
    trace_id: str,
    total: int,
    verified: int,
    skipped: int,
    skip_reasons: dict[str, int],
    elapsed_ms: float,
    outcome: str,
) -> None:
    logger.info(
        "stream_metrics",
        trace_id=trace_id,
        total_candidates=total,
        verified=verified,
        skipped=skipped,
        skip_reasons=skip_reasons,
        elapsed_ms=round(elapsed_ms, 2),
        outcome=outcome,
    )
