"""Stream a search from a running CAO engine server and print each event.

Usage:
    1. Start the server:   python -m cao_engine.main
    2. Run a search:       python scripts/stream_search.py "cozy ramen tonight" --domain places
"""

from __future__ import annotations

import argparse
import asyncio
import json

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"


def build_request(args: argparse.Namespace) -> dict:
    request = {
        "query": {"text": args.query, "domain": args.domain},
        "capsule": {"mode": "solo", "members": [{"id": "u1", "name": args.user}]},
        "options": {"max_results": args.max_results},
    }
    if args.city:
        request["logistics"] = {"search_location": {"city": args.city}}
    return request


def print_event(kind: str, data: str) -> None:
    payload = json.loads(data) if data else {}
    if kind == "candidate":
        print(f"  + {payload['name']}  [{payload['subheader']}]")
        print(f"      {payload['summary']}")
        for_user = (payload.get("personalization") or {}).get("for_user") or {}
        if for_user:
            print(f"      -> {for_user['text']}")
    elif kind == "bundle":
        print(f"\n{payload['headline']}: {payload['summary']}")
    elif kind == "done":
        print(
            f"done: {payload['total_candidates']} candidates, {payload['verified']} verified, "
            f"{payload['skipped']} skipped {payload['skip_reasons']} in {payload['elapsed_ms']:.0f} ms"
        )
    else:
        print(f"{kind}: {payload}")


async def main(args: argparse.Namespace) -> None:
    async with httpx.AsyncClient(base_url=args.base_url, timeout=httpx.Timeout(120.0)) as client:
        async with client.stream("POST", "/search/stream", json=build_request(args)) as response:
            response.raise_for_status()
            kind = "message"
            async for line in response.aiter_lines():
                if line.startswith("event: "):
                    kind = line[len("event: ") :]
                elif line.startswith("data: "):
                    print_event(kind, line[len("data: ") :])


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Stream a CAO engine search")
    parser.add_argument("query")
    parser.add_argument("--domain", default="general")
    parser.add_argument("--user", default="Sam")
    parser.add_argument("--city", default=None)
    parser.add_argument("--max-results", type=int, default=5)
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the running server (default: {DEFAULT_BASE_URL})",
    )
    asyncio.run(main(parser.parse_args()))
