"""Print the source discovery state: pending domains, evaluations and trusted sources.

Usage:
    python scripts/discovery_report.py [--db data/discovery.db]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cao_engine.discovery.source_discovery import DISCOVERY_KEY, TRUSTED_KEY
from cao_engine.storage.sqlite_document_store import SQLiteDocumentStore


def print_header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


async def main(db_path: str) -> None:
    if not Path(db_path).exists():
        print(f"No discovery database at {db_path}")
        return

    store = SQLiteDocumentStore(db_path)
    await store.initialize()
    data = await store.get(DISCOVERY_KEY) or {}
    trusted = await store.get(TRUSTED_KEY) or {}

    print_header("CANDIDATE DOMAINS")
    for domain, c in sorted((data.get("candidates") or {}).items()):
        print(f"  {domain:<32} sightings={len(c['sightings'])}  last_seen={c['last_seen'][:19]}")

    print_header("EVALUATED")
    for domain, e in sorted((data.get("evaluated") or {}).items()):
        status = "PROMOTED" if e["promoted"] else "rejected"
        score = e["score"]
        print(
            f"  [{status:>8}] {domain:<28} {score['category']:<10} "
            f"score={score['average_score']:.2f} threshold={e['threshold']:.2f}"
        )

    print_header("CATEGORY SCORES")
    for category, scores in sorted((data.get("category_scores") or {}).items()):
        print(f"  {category:<10} n={len(scores)}  {[round(s, 2) for s in sorted(scores)]}")

    print_header("TRUSTED SOURCES")
    for domain, entry in sorted(trusted.items()):
        print(f"  {domain:<32} {entry['display_name']} (tier {entry['tier']}, {entry['region']}, {entry['paywall']})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Report source discovery state")
    parser.add_argument("--db", default="data/discovery.db")
    asyncio.run(main(parser.parse_args().db))
