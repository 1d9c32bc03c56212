"""Tests for result assembly."""

import pytest

from cao_engine.models.domain import EnrichedCandidate, RawCandidate
from cao_engine.models.schemas import (
    CanonicalId,
    EnrichmentResult,
    MoviesEnrichment,
    PersonalizationNote,
    PlacesEnrichment,
)
from cao_engine.pipeline.assembly import (
    build_answer_bundle,
    build_subheader,
    result_id,
    to_cao_result,
)


def _places(**kwargs):
    return EnrichmentResult(verified=True, source="google_places", places=PlacesEnrichment(**kwargs))


def _enriched(enrichment, index=0, name="Grand Cafe"):
    return EnrichedCandidate(candidate=RawCandidate(index=index, name=name), enrichment=enrichment)


def test_places_subheader():
    assert build_subheader(_places(rating=4.5, price_level="$$", open_now=True)) == "4.5★ · $$ · Open now"
    assert build_subheader(_places(price_level="$")) == "$"


def test_movies_subheader():
    enrichment = EnrichmentResult(
        verified=True, source="tmdb", movies=MoviesEnrichment(year="1999", rating=7.84)
    )
    assert build_subheader(enrichment) == "1999 · 7.8/10"


def test_unverified_subheader_is_empty():
    assert build_subheader(EnrichmentResult.unverified()) == ""


def test_result_id_prefers_canonical():
    enrichment = _places(rating=4.0)
    enrichment.canonical = CanonicalId(type="place_id", value="ChIJ123")
    assert result_id(_enriched(enrichment), "places") == "google_places:ChIJ123"
    assert result_id(_enriched(_places(rating=4.0), index=3), "places") == "places:3"


def test_to_cao_result():
    note = PersonalizationNote(text="You'll love it")
    result = to_cao_result(_enriched(_places(rating=4.5)), "places", "A cafe.", note)

    assert result.type == "entity"
    assert result.name == "Grand Cafe"
    assert result.summary == "A cafe."
    assert result.personalization.for_user.text == "You'll love it"
    assert result.enrichment.places.rating == 4.5


def test_to_cao_result_rejects_unverified():
    with pytest.raises(ValueError):
        to_cao_result(
            _enriched(EnrichmentResult.unverified()),
            "places",
            "",
            PersonalizationNote(text="x"),
        )


def test_answer_bundle_defaults():
    bundle = build_answer_bundle(3, "music", "sad songs")
    assert bundle.headline == "3 songs found"
    assert bundle.summary == 'Found 3 verified songs for "sad songs"'
    assert bundle.count == 3


def test_answer_bundle_prefers_model_text():
    bundle = build_answer_bundle(2, "places", "ramen", headline="Slurp-worthy", summary="Two picks.")
    assert (bundle.headline, bundle.summary) == ("Slurp-worthy", "Two picks.")


def test_empty_answer_bundle():
    bundle = build_answer_bundle(0, "places", "ramen", headline="ignored")
    assert bundle.headline == "No results found"
    assert bundle.count == 0
