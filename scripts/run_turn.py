#!/usr/bin/env python3
"""Run one turn through the decision core and print the result.

Usage:
    python scripts/run_turn.py "generate an image of a lighthouse at sunset, using Flux"

    # Attach a reference image and fix the seed
    python scripts/run_turn.py "animate this" --image https://example.com/cat.png --seed 7

    # Force a category and turn on a director
    python scripts/run_turn.py "waves at dawn" --category video --director "Denis Villeneuve"
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from media_director.config import Settings
from media_director.core import Attachment, DecisionCore


async def run(args: argparse.Namespace) -> dict:
    settings = Settings.from_env()
    core = DecisionCore(settings=settings, seed=args.seed)
    if args.director:
        await core.set_active_director(args.session, args.director)
    attachments = [Attachment(ref=args.image)] if args.image else None
    result = await core.process_turn(
        args.session,
        args.text,
        attachments=attachments,
        forced_category=args.category,
    )
    return result.model_dump(mode="json", exclude_none=True)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one turn through the media director core")
    parser.add_argument("text", help="The user's message")
    parser.add_argument("--image", help="Reference image URL to attach")
    parser.add_argument("--category", help="Force an intent category (image, video, audio, voice, text)")
    parser.add_argument("--director", help="Enable director mode with this director")
    parser.add_argument("--seed", type=int, help="Seed for reproducible style and seed picks")
    parser.add_argument("--session", default="cli", help="Session id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        output = asyncio.run(run(args))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
