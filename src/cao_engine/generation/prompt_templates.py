"""All prompt templates for candidate generation, personalization and source scoring."""

from __future__ import annotations

import json

CANDIDATE_SYSTEM = """You are a recommendation scout. You propose real, specific, verifiable
entities. Every item you return is checked against an external data provider,
so never invent names."""

CANDIDATE_PROMPT = """Find {count} recommendations for: "{query}"
Domain: {domain}{intent_block}{excludes_block}
Location: {location}
{context_block}
IMPORTANT: Diversify across facets - vary by style, price, vibe, era, subgenre, etc. Avoid clustering similar options.

Return ONLY a JSON array - no explanation:
[
  {{
    "name": "exact name",
    "identifiers": {identifier_spec},
    {search_hint_guidance},
    "enrichment_hooks": {hooks}
  }}
]"""

CANDIDATE_STREAM_PROMPT = """Find {count} recommendations for: "{query}"
Domain: {domain}{intent_block}{excludes_block}
Location: {location}
{context_block}
Output EXACTLY one JSON object per line (NDJSON format). No extra text, no code fences.
Each line must be valid JSON:
{{"name": "...", "identifiers": {identifier_spec}, "search_hint": "...", "enrichment_hooks": {hooks}}}

Start outputting now:"""

VIDEO_SEARCH_PROMPT = """Search the web for {count} YouTube videos about: "{query}"{intent_block}{excludes_block}
{context_block}
For each video give its title, its channel and its full YouTube URL, one per line:
- "Title" by Channel - https://www.youtube.com/watch?v=VIDEO_ID

Only list videos you found in search results. Do not invent URLs."""

DOMAIN_GUIDANCE: dict[str, str] = {
    "places": "Focus on what you'd actually eat there, the vibe when you walk in, what regulars love. Do not repeat the address.",
    "movies": "Focus on what watching it feels like, its mood, standout performances or directorial choices.",
    "music": "Focus on what it sounds like, the feeling it evokes, where it sits in the artist's journey.",
    "events": "Focus on what you'd actually experience there, the energy, what makes it worth showing up for.",
    "videos": "Focus on what you'll learn or feel watching it and the creator's approach.",
    "articles": "What does the author observe or argue that you won't find elsewhere?",
    "books": "Name the key thesis or story and the author's expertise.",
    "news": "What happened, why it matters, and the angle this outlet brings. Be factual.",
    "general": "Explain what it is and why it is notable.",
}

FOR_USER_GUIDANCE: dict[str, str] = {
    "places": "Connect to their cuisine cravings, the vibe they're after, their budget. Flag noise, waits, dietary gaps.",
    "movies": "Connect to genres and directors they love. Flag pacing, intensity, or an unusual style.",
    "music": "Connect to artists and sounds they enjoy. Flag departures from their comfort zone.",
    "events": "Connect to the kind of fun they want. Flag timing, crowds, cost.",
    "videos": "Connect to topics they nerd out about. Flag length or difficulty.",
    "articles": "Connect to their interests. Flag paywalls, reading time, required context.",
    "books": "Connect to arguments that match their interests. Flag difficulty and length.",
    "news": "Connect to stories they follow. Flag paywalls and early reporting that may change.",
    "general": "Connect to what they care about.",
}

PERSONALIZE_BATCH_PROMPT = """Query: "{query}"
Domain: {domain}

Items: {names}

For each item write:
- "summary": 1-2 sentences on what it IS and how it fits the query (third person, specific). {guidance}
- "forUser": 1-2 sentences for {user_name}, written like a friend ("you", "your"). {for_user_guidance}
{group_block}
Preferences:
{preferences}

Return ONLY JSON keyed by the exact item names:
{{
  "answerBundle": {{"headline": "short headline for the whole set", "summary": "2 sentence overview"}},
  "personalizations": {{
    "ItemName": {{"summary": "...", "forUser": "..."{group_fields}}}
  }}
}}"""

GROUP_BLOCK = """This is a group search. Policy: {policy}
Also write, per item, "forGroup": one short note per member id ({member_ids}) and "groupNotes": a list of notes on overall group fit.
"""

SUMMARY_PROMPT = """Query: "{query}"

Write a brief summary of "{name}" that makes someone understand why it's worth their time.
{guidance}
1-2 sentences. Ground every claim in something specific: a name, a fact, a scene, a technique.

Return ONLY JSON:
{{"summaries": {{"{name}": "summary"}}}}"""

FOR_USER_PROMPT = """{for_user_guidance}

Why would "{name}" be great for {user_name}?
Search: "{query}"
Preferences: {preferences}

Write like a friend recommending something. Use "you" and "your", never "{user_name}'s preference".
One punchy sentence, max two. Be honest about caveats.

Return ONLY JSON:
{{"personalizations": {{"{name}": "recommendation"}}}}"""

SOURCE_SCORING_PROMPT = """You are evaluating a news source for inclusion in a curated quality registry.

Score this source on each criterion (1-10 scale):
1. impartiality: little political lean, balanced coverage.
2. accuracy: fact-driven, verified reporting, transparent corrections.
3. depth: analysis and context beyond surface facts.
4. expertise: experienced, specialized journalists.
5. globalPerspective: broad reach and regional context.
6. clarity: factual tone, no sensationalism or clickbait.
7. transparency: published standards, bylines, corrections policy.
8. timeliness: timely coverage without sacrificing accuracy.

Source domain: {domain}
Sample articles from this source:
{articles}

Respond with ONLY valid JSON:
{{
  "displayName": "Human-readable outlet name",
  "scores": {{"impartiality": 0, "accuracy": 0, "depth": 0, "expertise": 0,
              "globalPerspective": 0, "clarity": 0, "transparency": 0, "timeliness": 0}},
  "category": "general|specialty|regional|wire",
  "suggestedTier": 1,
  "region": "primary region, e.g. US, UK, EU, Asia, Global",
  "paywall": "free|metered|hard",
  "specialty": null,
  "reasoning": "1-2 sentence justification"
}}"""


def format_context_block(conversation, max_turns: int) -> str:
    """Format the most recent conversation turns; older context is dropped."""
    if conversation is None or max_turns <= 0:
        return ""
    lines: list[str] = []
    messages = conversation.recent_messages[-max_turns:]
    if messages:
        lines.append("Recent conversation:")
        for m in messages:
            lines.append(f"  {m.speaker}: {m.content}")
    searches = conversation.previous_searches[-max_turns:]
    if searches:
        lines.append("Previous searches: " + "; ".join(searches))
    corrections = conversation.corrections[-max_turns:]
    if corrections:
        lines.append("User corrections: " + "; ".join(corrections))
    if not lines:
        return ""
    return "\n" + "\n".join(lines) + "\n"


def format_location(logistics) -> str:
    location = logistics.search_location if logistics else None
    if location is None:
        return "any"
    parts = [p for p in (location.neighborhood, location.city) if p]
    if parts:
        return ", ".join(parts)
    if location.coordinates is not None:
        return f"{location.coordinates.lat},{location.coordinates.lng}"
    return "any"


def format_preferences(members, domain: str) -> str:
    lines = []
    for m in members:
        prefs = m.preferences.get(domain, m.preferences)
        lines.append(f"- {m.name} ({m.id}): {json.dumps(prefs, sort_keys=True)}")
    return "\n".join(lines)


def format_sightings(sightings) -> str:
    return "\n\n".join(
        f'{i}. "{s["title"]}"\n   {s["snippet"]}' for i, s in enumerate(sightings, 1)
    )
