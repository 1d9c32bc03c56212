"""Tests for source discovery and quartile promotion."""

import json
import re

import pytest

from cao_engine.discovery.source_discovery import (
    SNIPPET_LIMIT,
    TITLE_LIMIT,
    SourceDiscovery,
    domain_of,
    quartile_threshold,
)
from cao_engine.exceptions import DiscoveryError, GenerationError
from cao_engine.storage.sqlite_document_store import SQLiteDocumentStore

RUBRIC_KEYS = (
    "impartiality",
    "accuracy",
    "depth",
    "expertise",
    "globalPerspective",
    "clarity",
    "transparency",
    "timeliness",
)


def scorer(scores_by_domain, category="general"):
    """Responder giving every rubric criterion the domain's score."""

    def respond(prompt):
        domain = re.search(r"Source domain: (\S+)", prompt).group(1)
        score = scores_by_domain[domain]
        return json.dumps(
            {
                "displayName": domain.split(".")[0].title(),
                "scores": {k: score for k in RUBRIC_KEYS},
                "category": category,
                "suggestedTier": 2,
                "region": "US",
                "paywall": "free",
                "specialty": None,
                "reasoning": "ok",
            }
        )

    return respond


@pytest.fixture
def discovery_factory(settings):
    async def _make(llm):
        discovery = SourceDiscovery(llm, SQLiteDocumentStore(settings.discovery_db_path), settings)
        await discovery.initialize()
        return discovery

    return _make


def sight(discovery, domain, count=3):
    for i in range(count):
        discovery.observe_url(f"https://www.{domain}/story-{i}", f"Story {i}", "snippet")


def test_quartile_threshold():
    assert quartile_threshold([5, 6, 7, 8]) == 8
    assert quartile_threshold([8, 5, 7, 6, 7]) == 7
    assert quartile_threshold([9, 9, 9]) == 5.0
    assert quartile_threshold([], default=6.5) == 6.5


def test_domain_of():
    assert domain_of("https://www.Example.com/a?b=1") == "example.com"
    assert domain_of("https://news.example.org") == "news.example.org"
    assert domain_of("not a url") is None


async def test_sightings_capped_deduped_and_truncated(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm())
    discovery.record_sighting("example.com", "t" * 500, "s" * 500, "https://example.com/0")
    discovery.record_sighting("example.com", "dup", "dup", "https://example.com/0")
    for i in range(1, 8):
        discovery.record_sighting("example.com", f"T{i}", "s", f"https://example.com/{i}")

    sightings = discovery._data["candidates"]["example.com"]["sightings"]
    assert len(sightings) == 5
    assert len({s["url"] for s in sightings}) == 5
    assert sightings[-1]["url"] == "https://example.com/7"

    discovery.record_sighting("long.com", "t" * 500, "s" * 500, "https://long.com/a")
    first = discovery._data["candidates"]["long.com"]["sightings"][0]
    assert len(first["title"]) == TITLE_LIMIT
    assert len(first["snippet"]) == SNIPPET_LIMIT


async def test_pending_requires_minimum_sightings(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm())
    sight(discovery, "a.com", count=2)
    assert discovery.pending_count() == 0
    sight(discovery, "b.com", count=3)
    assert discovery.pending_count() == 1


async def test_promotion_against_top_quartile(discovery_factory, make_llm):
    scores = {"a.com": 5, "b.com": 6, "c.com": 7, "d.com": 8, "e.com": 7, "f.com": 8}
    discovery = await discovery_factory(make_llm(responder=scorer(scores)))

    for domain in ("a.com", "b.com", "c.com", "d.com"):
        sight(discovery, domain)
    # Fewer than four prior scores: default threshold 5.0
    assert set(await discovery.evaluate_candidates()) == {"a.com", "b.com", "c.com", "d.com"}

    sight(discovery, "e.com")
    assert await discovery.evaluate_candidates() == {}
    record = discovery.evaluation("e.com")
    assert record["threshold"] == 8
    assert record["promoted"] is False
    assert not discovery.is_trusted("e.com")

    sight(discovery, "f.com")
    promoted = await discovery.evaluate_candidates()
    assert list(promoted) == ["f.com"]
    assert promoted["f.com"]["display_name"] == "F"
    assert promoted["f.com"]["tier"] == 2
    assert discovery.is_trusted("f.com")


async def test_score_equal_to_threshold_promotes(discovery_factory, make_llm):
    scores = {"a.com": 5, "b.com": 6, "c.com": 7, "d.com": 8, "z.com": 8}
    discovery = await discovery_factory(make_llm(responder=scorer(scores)))
    for domain in ("a.com", "b.com", "c.com", "d.com"):
        sight(discovery, domain)
    await discovery.evaluate_candidates()

    sight(discovery, "z.com")
    assert "z.com" in await discovery.evaluate_candidates()
    assert discovery.evaluation("z.com")["threshold"] == 8


async def test_evaluated_domains_not_recorded_again(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(responder=scorer({"a.com": 2})))
    sight(discovery, "a.com")
    await discovery.evaluate_candidates()

    assert discovery.evaluation("a.com")["promoted"] is False
    sight(discovery, "a.com")
    assert "a.com" not in discovery._data["candidates"]
    assert discovery.pending_count() == 0


async def test_per_run_cap(discovery_factory, make_llm):
    scores = {f"s{i}.com": 6 for i in range(7)}
    llm = make_llm(responder=scorer(scores))
    discovery = await discovery_factory(llm)
    for domain in scores:
        sight(discovery, domain)

    await discovery.evaluate_candidates()
    assert len(llm.calls) == 5
    assert discovery.pending_count() == 2


async def test_scoring_failure_leaves_candidate_untouched(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(error=GenerationError("quota")))
    sight(discovery, "a.com")
    before = json.dumps(discovery._data["candidates"]["a.com"], sort_keys=True)

    assert await discovery.evaluate_candidates() == {}
    assert json.dumps(discovery._data["candidates"]["a.com"], sort_keys=True) == before
    assert discovery.evaluation("a.com") is None


async def test_unparseable_score_leaves_candidate_untouched(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(responses=['{"scores": {"accuracy": "high"}}']))
    sight(discovery, "a.com")

    assert await discovery.evaluate_candidates() == {}
    assert discovery.pending_count() == 1
    assert discovery._data["category_scores"] == {}


async def test_state_survives_reload(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(responder=scorer({"a.com": 9, "b.com": 9})))
    sight(discovery, "a.com")
    sight(discovery, "b.com", count=1)
    await discovery.evaluate_candidates()

    reloaded = await discovery_factory(make_llm())
    assert reloaded.is_trusted("a.com")
    assert list(reloaded.trusted_sources()) == ["a.com"]
    assert reloaded.evaluation("a.com")["score"]["average_score"] == 9
    assert reloaded._data["category_scores"] == {"general": [9]}
    assert len(reloaded._data["candidates"]["b.com"]["sightings"]) == 1


async def test_schedule_evaluation(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(responder=scorer({"a.com": 9})))
    assert discovery.schedule_evaluation() is None

    sight(discovery, "a.com")
    task = discovery.schedule_evaluation()
    await task
    assert discovery.is_trusted("a.com")
    await discovery.aclose()


async def test_malformed_document_rejected(settings, make_llm):
    store = SQLiteDocumentStore(settings.discovery_db_path)
    await store.initialize()
    await store.put("source_discovery", {"version": 1, "candidates": []})

    discovery = SourceDiscovery(make_llm(), store, settings)
    with pytest.raises(DiscoveryError):
        await discovery.initialize()


@pytest.mark.parametrize("bad", [85, 0, 11, 7.5, True, "8"])
async def test_out_of_range_scores_leave_candidate_pending(discovery_factory, make_llm, bad):
    discovery = await discovery_factory(make_llm(responder=scorer({"junk.example": bad})))
    sight(discovery, "junk.example")

    assert await discovery.evaluate_candidates() == {}
    assert not discovery.is_trusted("junk.example")
    assert discovery.evaluation("junk.example") is None
    assert discovery.pending_count() == 1
    assert discovery._data["category_scores"] == {}


async def test_boundary_scores_accepted(discovery_factory, make_llm):
    discovery = await discovery_factory(make_llm(responder=scorer({"low.com": 1, "high.com": 10})))
    sight(discovery, "low.com")
    sight(discovery, "high.com")

    await discovery.evaluate_candidates()

    assert discovery.evaluation("low.com")["score"]["average_score"] == 1
    assert discovery.is_trusted("high.com")
