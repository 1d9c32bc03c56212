"""Tests for Stage A candidate generation."""

import json

import pytest

from cao_engine.exceptions import GenerationError
from cao_engine.generation.candidate_generator import CandidateGenerator, video_candidates
from cao_engine.models.domain import RawCandidate
from cao_engine.protocols.llm import GenerationMode


async def test_grounded_mode_for_current_queries(settings, make_llm, make_request):
    llm = make_llm(responses=['[{"name": "Jazz Night"}]'])
    generator = CandidateGenerator(llm, settings)
    await generator.generate(make_request("concerts tonight", domain="events"), 5)
    assert llm.calls[0]["mode"] is GenerationMode.GROUNDED


async def test_strict_json_mode_for_evergreen_queries(settings, make_llm, make_request):
    llm = make_llm(responses=['[{"name": "Sushi Dai"}]'])
    generator = CandidateGenerator(llm, settings)
    await generator.generate(make_request("best classic sushi"), 5)
    assert llm.calls[0]["mode"] is GenerationMode.STRICT_JSON


async def test_nameless_candidates_dropped_and_indexed(settings, make_llm, make_request):
    llm = make_llm(
        responses=[
            json.dumps(
                [
                    {"name": "A", "enrichment_hooks": ["tmdb"]},
                    {"name": "  "},
                    {"identifiers": {"year": 1999}},
                    {"name": 42},
                    {"name": "B", "search_hint": "B film"},
                ]
            )
        ]
    )
    generator = CandidateGenerator(llm, settings)
    candidates = await generator.generate(make_request("best films", domain="movies"), 10)
    assert [c.name for c in candidates] == ["A", "B"]
    assert [c.index for c in candidates] == [0, 1]
    assert candidates[0].hooks == ["tmdb"]
    # Omitted hooks fall back to the domain defaults
    assert candidates[1].hooks == ["tmdb", "omdb"]
    assert candidates[1].query == "B film"


async def test_fenced_response_parsed(settings, make_llm, make_request):
    llm = make_llm(responses=['prefix text ```json\n[{"name":"X"}]\n``` suffix'])
    candidates = await CandidateGenerator(llm, settings).generate(make_request(), 5)
    assert [c.name for c in candidates] == ["X"]


async def test_target_count_caps_output(settings, make_llm, make_request):
    llm = make_llm(responses=[json.dumps([{"name": f"P{i}"} for i in range(8)])])
    candidates = await CandidateGenerator(llm, settings).generate(make_request(), 3)
    assert len(candidates) == 3


async def test_completion_error_yields_empty_list(settings, make_llm, make_request):
    llm = make_llm(error=GenerationError("quota exceeded"))
    assert await CandidateGenerator(llm, settings).generate(make_request(), 5) == []


async def test_unparseable_response_yields_empty_list(settings, make_llm, make_request):
    llm = make_llm(responses=["I could not find anything, sorry."])
    assert await CandidateGenerator(llm, settings).generate(make_request(), 5) == []


def test_prompt_embeds_request_context(settings, make_llm, make_request):
    messages = [{"speaker": "user", "content": f"message {i}"} for i in range(1, 8)]
    request = make_request(
        "quiet cafes",
        excludes=["Blue Bottle"],
        conversation={"recent_messages": messages, "previous_searches": ["tea houses"]},
        logistics={"search_location": {"city": "Oakland", "neighborhood": "Temescal"}},
    )
    prompt = CandidateGenerator(make_llm(), settings).build_prompt(request, 6)

    assert '"quiet cafes"' in prompt
    assert "Find 6 recommendations" in prompt
    assert "Blue Bottle" in prompt
    assert "Temescal, Oakland" in prompt
    assert "google_places" in prompt
    assert "neighborhood" in prompt
    assert "tea houses" in prompt
    # Only the last five turns are kept
    assert "message 3" in prompt and "message 7" in prompt
    assert "message 2" not in prompt


async def test_stream_yields_complete_lines(settings, make_llm, make_request):
    llm = make_llm(
        stream_chunks=[
            '{"name": "A"}\n{"na',
            'me": "B", "enrichment_hooks": ["wikipedia"]}\n',
            "```\n",
            '{"name": "C"}',
        ]
    )
    generator = CandidateGenerator(llm, settings)
    names = [c.name async for c in generator.stream(make_request(domain="general"), 10)]
    assert names == ["A", "B", "C"]


async def test_stream_stops_at_target(settings, make_llm, make_request):
    lines = "".join(json.dumps({"name": f"N{i}"}) + "\n" for i in range(10))
    llm = make_llm(stream_chunks=[lines])
    generator = CandidateGenerator(llm, settings)
    candidates = [c async for c in generator.stream(make_request(), 4)]
    assert [c.index for c in candidates] == [0, 1, 2, 3]


async def test_stream_uses_text_mode_unless_grounded(settings, make_llm, make_request):
    llm = make_llm(stream_chunks=['{"name": "A"}\n'])
    generator = CandidateGenerator(llm, settings)
    [c async for c in generator.stream(make_request("best classic books", domain="books"), 3)]
    assert llm.calls[0]["mode"] is GenerationMode.TEXT


async def test_stream_error_propagates_after_partial_output(settings, make_llm, make_request):
    llm = make_llm(stream_chunks=['{"name": "A"}\n'], stream_error=GenerationError("reset"))
    seen = []
    with pytest.raises(GenerationError):
        async for c in CandidateGenerator(llm, settings).stream(make_request(), 5):
            seen.append(c.name)
    assert seen == ["A"]


def test_candidate_query_prefers_search_hint():
    assert RawCandidate(index=0, name="A", search_hint="A film").query == "A film"
    assert RawCandidate(index=0, name="A").query == "A"


VIDEO_ANSWER = """Here are some videos:
- "Intro to Sourdough" by Bake Lab - https://www.youtube.com/watch?v=abcDEF12345
- "Shaping Loaves" by Crumb Club - https://youtu.be/XYZ_-987654
- "Intro to Sourdough" again - https://www.youtube.com/watch?v=abcDEF12345&t=30
- Untitled clip https://youtu.be/short123
- https://www.youtube.com/watch?v=QQQqqq11111
"""


async def test_video_search_is_grounded(settings, make_llm, make_request):
    llm = make_llm(responses=[VIDEO_ANSWER])
    candidates = await CandidateGenerator(llm, settings).generate(
        make_request("sourdough basics", domain="videos"), 10
    )

    assert llm.calls[0]["mode"] is GenerationMode.GROUNDED
    assert '"sourdough basics"' in llm.calls[0]["prompt"]
    assert [c.identifiers["youtube_id"] for c in candidates] == [
        "abcDEF12345",
        "XYZ_-987654",
        "QQQqqq11111",
    ]
    assert [c.index for c in candidates] == [0, 1, 2]
    assert all(c.hooks == ["youtube"] for c in candidates)


def test_video_candidates_titles_and_fallbacks():
    candidates = video_candidates(VIDEO_ANSWER, "sourdough basics", 10)

    assert candidates[0].name == "Intro to Sourdough"
    assert candidates[0].query == "Intro to Sourdough"
    assert candidates[1].name == "Shaping Loaves"
    # No quoted title on the line
    assert candidates[2].name == "Video 3"
    assert candidates[2].query == "sourdough basics"


def test_video_candidates_capped_at_target():
    text = "\n".join(f"https://youtu.be/vid{i:08d}" for i in range(6))
    candidates = video_candidates(text, "q", 4)
    assert [c.identifiers["youtube_id"] for c in candidates] == [f"vid{i:08d}" for i in range(4)]


async def test_video_search_error_yields_empty_list(settings, make_llm, make_request):
    llm = make_llm(error=GenerationError("quota exceeded"))
    generator = CandidateGenerator(llm, settings)
    assert await generator.generate(make_request(domain="videos"), 5) == []


async def test_stream_uses_video_search(settings, make_llm, make_request):
    llm = make_llm(responses=[VIDEO_ANSWER])
    generator = CandidateGenerator(llm, settings)
    streamed = [c async for c in generator.stream(make_request(domain="videos"), 2)]

    assert [c.name for c in streamed] == ["Intro to Sourdough", "Shaping Loaves"]
    assert llm.calls[0]["mode"] is GenerationMode.GROUNDED
    assert llm.chunks_sent == 0
