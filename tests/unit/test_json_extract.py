"""Tests for JSON extraction from completion text."""

from cao_engine.generation.candidate_generator import parse_candidates, parse_ndjson_line
from cao_engine.generation.json_extract import extract_json, extract_object


def test_direct_parse():
    assert extract_json('[{"name": "X"}]') == [{"name": "X"}]


def test_fenced_block_when_direct_parse_fails():
    text = 'prefix text ```json\n[{"name":"X"}]\n``` suffix'
    assert extract_json(text) == [{"name": "X"}]


def test_fence_without_language_tag():
    assert extract_json('Here:\n```\n{"a": 1}\n```') == {"a": 1}


def test_first_array_in_prose():
    text = 'Sure! Here are some: [{"name": "A"}, {"name": "B"}] Enjoy.'
    assert extract_json(text) == [{"name": "A"}, {"name": "B"}]


def test_object_preference():
    text = 'Result: {"summaries": {"A": "text"}} done'
    assert extract_object(text) == {"summaries": {"A": "text"}}


def test_unparseable_returns_none():
    assert extract_json("no json here") is None
    assert extract_json("") is None
    assert extract_object("[1, 2]") is None


def test_parse_candidates_accepts_wrapped_list():
    assert parse_candidates('{"candidates": [{"name": "A"}, 3]}') == [{"name": "A"}]


def test_parse_candidates_rejects_non_list():
    assert parse_candidates('{"name": "A"}') == []
    assert parse_candidates("garbage") == []


def test_ndjson_line_parsing():
    assert parse_ndjson_line('  {"name": "A"}  ') == {"name": "A"}
    assert parse_ndjson_line('{"name": "A"},') == {"name": "A"}
    assert parse_ndjson_line("```json") is None
    assert parse_ndjson_line("") is None
    assert parse_ndjson_line("not json") is None
    assert parse_ndjson_line("[1]") is None
