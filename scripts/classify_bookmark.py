#!/usr/bin/env python3
"""Classify a single bookmark from the command line.

Usage:
    python scripts/classify_bookmark.py --title "ML Tutorial" --url https://x.com/ml
    python scripts/classify_bookmark.py --title "..." --url "..." --provider ollama
    python scripts/classify_bookmark.py --title "..." --url "..." --tree folders.json

The optional --tree file is a nested JSON object in the InMemoryBookmarkStore
format ({"Bookmarks bar": {"Tech": {"Python": {}}}}) and supplies the
existing folder taxonomy for the prompt.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Allow running from repo root without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from smartmark.classifier import ClassificationOrchestrator
from smartmark.config import get_config
from smartmark.errors import SmartMarkError
from smartmark.models import Metadata
from smartmark.providers import create_provider
from smartmark.saver import classify_with_fallback
from smartmark.store import InMemoryBookmarkStore


async def run(args: argparse.Namespace) -> int:
    config = get_config()

    if args.tree:
        tree = json.loads(Path(args.tree).read_text(encoding="utf-8"))
        store = InMemoryBookmarkStore.from_tree(tree)
    else:
        store = InMemoryBookmarkStore()

    provider = create_provider(args.provider or config.ai_provider, config)
    async with provider:
        orchestrator = ClassificationOrchestrator.from_config(store, config, provider=provider)
        metadata = Metadata.from_bookmark(args.title, args.url, main_content=args.content)
        suggestions = await classify_with_fallback(
            orchestrator, metadata, config.fallback_folder
        )

    if args.json:
        print(json.dumps([s.to_dict() for s in suggestions], indent=2))
    else:
        for suggestion in suggestions:
            print(f"{suggestion.confidence:5.2f}  {suggestion.folder_path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Suggest bookmark folders for a page using the configured AI provider.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--title", required=True, help="Page title")
    parser.add_argument("--url", required=True, help="Page URL")
    parser.add_argument("--content", default=None, help="Optional main content snippet")
    parser.add_argument("--tree", default=None, help="JSON file with the existing bookmark tree")
    parser.add_argument(
        "--provider",
        default=None,
        help="Provider name (gemini, lmstudio, ollama, openai, openrouter, claude)",
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except SmartMarkError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
