"""Open Library search with fuzzy title/author matching. No key required."""

from __future__ import annotations

import re

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import BooksEnrichment, CanonicalId, EnrichmentResult
from cao_engine.verification.hooks.base import HTTPHook

BASE_URL = "https://openlibrary.org"
MIN_MATCH_SCORE = 0.4

STOP_WORDS = frozenset(
    "the and for are but not you all can had was one our out has have from that this with".split()
)


def _normalize(title: str) -> str:
    return re.sub(r"[^a-z0-9\s]", "", title.lower()).strip()


def _main_title(title: str) -> str:
    return re.split(r"[:\-–—]", title)[0].strip()


def _main_words(title: str) -> list[str]:
    return [w for w in _normalize(_main_title(title)).split() if len(w) > 1 and w not in STOP_WORDS]


def score_match(doc: dict, title: str, author: str) -> float:
    """Score an Open Library search doc against the requested title/author."""
    doc_title = doc.get("title") or ""
    target_norm = _normalize(title)
    doc_norm = _normalize(doc_title)

    score = 0.0
    main_target = _main_words(title)
    main_doc = _main_words(doc_title)
    if main_target and main_doc:
        overlap = len(set(main_target) & set(main_doc))
        if overlap / len(main_target) >= 0.8 and overlap / len(main_doc) >= 0.8:
            score = 0.85

    if score == 0.0:
        target_words = [w for w in target_norm.split() if len(w) > 2]
        doc_words = [w for w in doc_norm.split() if len(w) > 2]
        overlap = sum(1 for w in doc_words if w in set(target_words))
        if not target_words or overlap < (1 if len(target_words) <= 3 else 2):
            return 0.0
        fwd = overlap / len(target_words)
        bwd = overlap / len(doc_words) if doc_words else 0.0
        score = 0.0 if fwd + bwd == 0 else 2 * fwd * bwd / (fwd + bwd)

    if author:
        wanted = author.lower()
        if any(wanted in a.lower() or a.lower() in wanted for a in doc.get("author_name") or []):
            score += 0.3
    if doc_norm == target_norm:
        score += 0.5
    return score


def find_best_match(docs: list[dict], title: str, author: str) -> dict | None:
    best, best_score = None, 0.0
    for doc in docs:
        score = score_match(doc, title, author)
        if score > best_score:
            best, best_score = doc, score
    return best if best_score >= MIN_MATCH_SCORE else None


class OpenLibraryHook(HTTPHook):
    name = "openlibrary"
    domains = frozenset({"books"})
    priority = 90
    requires_key = False

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        title = candidate.name
        author = str(candidate.identifiers.get("author") or "")
        params = {"q": title, "limit": 5}
        if author:
            params["author"] = author

        data = await self._get_json(f"{BASE_URL}/search.json", params=params)
        match = find_best_match(data.get("docs") or [], title, author)
        if match is None:
            return None

        key = match.get("key")
        cover = match.get("cover_i")
        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="openlibrary_key", value=key or title),
            books=BooksEnrichment(
                title=match.get("title"),
                author=(match.get("author_name") or [author or None])[0],
                publisher=(match.get("publisher") or [None])[0],
                year=match.get("first_publish_year"),
                page_count=match.get("number_of_pages_median"),
                cover_url=f"https://covers.openlibrary.org/b/id/{cover}-M.jpg" if cover else None,
                isbn=(match.get("isbn") or [None])[0],
                open_library_url=f"{BASE_URL}{key}" if key else None,
                subjects=(match.get("subject") or [])[:5],
            ),
        )

    async def _ping(self) -> None:
        await self._get_json(f"{BASE_URL}/search.json", params={"q": "dune", "limit": 1})
