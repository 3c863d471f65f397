#!/usr/bin/env python3
"""
Check serving-config addressing against the live Discovery Engine index.

Prints the candidate resource paths resolved from the environment (.env), then
runs one search and reports which candidate answered and what came back.

Run from project root:

    python scripts/check_retrieval.py "Contact Change Log"
    python scripts/check_retrieval.py --list
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import get_settings
from app.core.errors import BackendError
from app.services.retrieval_service import retrieve_top_docs


def main() -> int:
    parser = argparse.ArgumentParser(description="Try the configured serving configs with one query.")
    parser.add_argument("query", nargs="?", default="contact", help="Search text (default: contact).")
    parser.add_argument("-k", type=int, default=5, help="Number of results to request.")
    parser.add_argument("--list", action="store_true", help="Only print the candidate resource paths.")
    args = parser.parse_args()

    settings = get_settings()
    try:
        candidates = settings.serving.candidates()
    except BackendError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    print("Candidates (tried in order):")
    for path in candidates:
        print(f"  {path}")
    if args.list:
        return 0

    try:
        outcome = asyncio.run(retrieve_top_docs(args.query, settings, k=args.k))
    except BackendError as e:
        print(f"Retrieval failed: code={e.code} details={e.details} message={e.message}", file=sys.stderr)
        return 1

    print(f"\nAnswered by: {outcome.resource_path_used}")
    if outcome.summary_text:
        print(f"Summary: {outcome.summary_text}")
    for i, item in enumerate(outcome.items, start=1):
        print(f"[{i}] {item.title or '(untitled)'}")
        if item.url:
            print(f"    {item.url}")
        if item.snippet:
            print(f"    {item.snippet[:160]}")
    print(f"Done. {len(outcome.items)} results.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
