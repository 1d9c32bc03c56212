"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import pytest

from cao_engine.config.settings import Settings
from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import (
    ArticlesEnrichment,
    EnrichmentResult,
    PlacesEnrichment,
    SearchRequest,
)
from cao_engine.protocols.llm import GenerationMode


class FakeLLM:
    """Scripted completion service.

    ``responder`` maps a prompt to a reply; otherwise ``responses`` are
    returned in order and "" once exhausted. ``stream_chunks`` feed
    ``generate_stream``, optionally followed by ``stream_error``.
    """

    def __init__(
        self,
        responses: list[str] | None = None,
        responder=None,
        error: Exception | None = None,
        stream_chunks: list[str] | None = None,
        stream_error: Exception | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.responder = responder
        self.error = error
        self.stream_chunks = list(stream_chunks or [])
        self.stream_error = stream_error
        self.calls: list[dict] = []
        self.chunks_sent = 0

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ) -> str:
        self.calls.append({"prompt": prompt, "system": system, "mode": mode})
        if self.error is not None:
            raise self.error
        if self.responder is not None:
            return self.responder(prompt)
        return self.responses.pop(0) if self.responses else ""

    async def generate_stream(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        mode: GenerationMode = GenerationMode.TEXT,
    ):
        self.calls.append({"prompt": prompt, "system": system, "mode": mode, "stream": True})
        for chunk in self.stream_chunks:
            self.chunks_sent += 1
            yield chunk
        if self.stream_error is not None:
            raise self.stream_error


def places_result(source: str) -> EnrichmentResult:
    return EnrichmentResult(
        verified=True,
        source=source,
        places=PlacesEnrichment(rating=4.5, price_level="$$", open_now=True),
    )


def article_result(source: str, url: str) -> EnrichmentResult:
    return EnrichmentResult(
        verified=True,
        source=source,
        articles=ArticlesEnrichment(title="A story", source="Example", url=url),
    )


class FakeHook:
    """In-memory verification hook.

    ``behavior`` is "verified", "unverified", "none", or an exception to raise.
    ``delay`` seconds elapse before answering; ``finished`` flips afterwards.
    """

    def __init__(
        self,
        name: str,
        domains: tuple[str, ...] = ("places",),
        priority: int = 50,
        behavior="verified",
        delay: float = 0.0,
        result_factory=places_result,
    ) -> None:
        self.name = name
        self.domains = frozenset(domains)
        self.priority = priority
        self.behavior = behavior
        self.delay = delay
        self.result_factory = result_factory
        self.calls: list[str] = []
        self.finished = False
        self.closed = False
        self.healthy = True

    async def enrich(self, candidate, context):
        self.calls.append(candidate.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished = True
        if isinstance(self.behavior, Exception):
            raise self.behavior
        if self.behavior == "verified":
            return self.result_factory(self.name)
        if self.behavior == "unverified":
            return EnrichmentResult.unverified()
        return None

    async def health_check(self) -> bool:
        return self.healthy

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Test settings with temp paths."""
    tmp = tempfile.mkdtemp()
    return Settings(
        google_api_key="test-key",
        discovery_db_path=str(Path(tmp) / "discovery.db"),
        log_json=False,
    )


@pytest.fixture
def make_request():
    def _make(
        text: str = "cozy ramen spots",
        domain: str = "places",
        max_results: int = 5,
        members: list[dict] | None = None,
        mode: str = "solo",
        include_debug: bool = False,
        timeout_ms: int = 2000,
        excludes: list[str] | None = None,
        **extra,
    ) -> SearchRequest:
        return SearchRequest.model_validate(
            {
                "query": {"text": text, "domain": domain, "excludes": excludes or []},
                "capsule": {
                    "mode": mode,
                    "members": members or [{"id": "u1", "name": "Alex", "preferences": {}}],
                },
                "options": {
                    "max_results": max_results,
                    "include_debug": include_debug,
                    "verification_timeout_ms": timeout_ms,
                },
                **extra,
            }
        )

    return _make


@pytest.fixture
def sample_request(make_request):
    return make_request()


@pytest.fixture
def context():
    return VerificationContext(timeout_ms=200, domain="places", request_id="test")


@pytest.fixture
def fake_llm():
    return FakeLLM()


def candidate(index: int, name: str, hooks: list[str] | None = None, **kwargs) -> RawCandidate:
    return RawCandidate(index=index, name=name, hooks=hooks or ["fake"], **kwargs)


@pytest.fixture
def make_candidate():
    return candidate


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def make_hook():
    return FakeHook


@pytest.fixture
def make_article_result():
    return article_result
