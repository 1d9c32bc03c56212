"""Protocol for verification hooks (one adapter per external data provider)."""

from __future__ import annotations

from typing import Protocol

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import EnrichmentResult


class VerificationHook(Protocol):
    name: str
    domains: frozenset[str]
    priority: int  # higher = tried first by hooks_for_domain()

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None: ...

    async def health_check(self) -> bool: ...

    async def aclose(self) -> None: ...
