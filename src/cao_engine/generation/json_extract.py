"""Robust JSON extraction from completion-service text.

The model is asked for JSON but routinely wraps it in prose or markdown
fences, and grounded mode cannot enforce a JSON mime type at all. Strategies
are tried in order: whole text, fenced code block, first bracketed substring.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.I)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _try_load(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def extract_json(text: str, prefer: str = "array") -> Any | None:
    """Return the first JSON value found in ``text`` or None.

    ``prefer`` picks the bracket shape searched for by the last strategy:
    "array" for candidate lists, "object" for keyed personalization maps.
    """
    if not text:
        return None

    parsed = _try_load(text.strip())
    if parsed is not None:
        return parsed

    match = _FENCE_RE.search(text)
    if match:
        parsed = _try_load(match.group(1).strip())
        if parsed is not None:
            return parsed

    pattern = _ARRAY_RE if prefer == "array" else _OBJECT_RE
    match = pattern.search(text)
    if match:
        return _try_load(match.group(0))
    return None


def extract_object(text: str) -> dict | None:
    parsed = extract_json(text, prefer="object")
    return parsed if isinstance(parsed, dict) else None
