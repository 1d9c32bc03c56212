"""Tests for temporality classification."""

import pytest

from cao_engine.query.temporality import classify_temporality, needs_grounding


def test_classification_is_deterministic():
    first = classify_temporality("best pizza", "places")
    for _ in range(5):
        assert classify_temporality("best pizza", "places") == first
    assert first.type == "evergreen"
    assert first.confidence == "medium"
    assert first.use_grounding is False


def test_current_wins_by_strict_count():
    result = classify_temporality("classic diner open now", "places")
    # "now" + "open now" against "classic"
    assert result.type == "current"
    assert result.confidence == "high"
    assert result.use_grounding is True


def test_evergreen_wins_by_strict_count():
    result = classify_temporality("best classic films of all-time", "events")
    assert result.type == "evergreen"
    assert result.confidence == "high"
    assert result.use_grounding is False


@pytest.mark.parametrize(
    "domain,expected",
    [
        ("places", "current"),
        ("events", "current"),
        ("articles", "current"),
        ("news", "current"),
        ("movies", "evergreen"),
        ("music", "evergreen"),
        ("videos", "evergreen"),
        ("books", "evergreen"),
        ("general", "evergreen"),
    ],
)
def test_tie_falls_back_to_domain_default(domain, expected):
    result = classify_temporality("classic now", domain)
    assert result.type == expected
    assert result.confidence == "low"
    assert result.use_grounding is (expected == "current")


def test_no_indicators_uses_domain_default():
    assert classify_temporality("ramen", "events").type == "current"
    assert classify_temporality("ramen", "books").type == "evergreen"


def test_unknown_domain_defaults_to_evergreen():
    result = classify_temporality("something", "podcasts")
    assert result.type == "evergreen"
    assert result.confidence == "low"


def test_recent_years_are_current_and_old_years_evergreen():
    assert classify_temporality("concerts 2025", "music").type == "current"
    assert classify_temporality("albums from 1994", "music").type == "evergreen"
    assert classify_temporality("films from 2019", "places").type == "evergreen"


def test_needs_grounding():
    assert needs_grounding("what's trending today", "movies") is True
    assert needs_grounding("timeless novels", "books") is False
