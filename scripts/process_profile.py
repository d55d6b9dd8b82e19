"""
Run a profile through the enhancement pipeline from the command line.

Accepts a LinkedIn URL, a path to a JSON profile file, or inline JSON and
prints the original profile, the enhanced profile and the recommendations.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from linkfolio.backend.config import get_settings
from linkfolio.backend.dependencies import build_profile_fetcher, build_text_generator
from linkfolio.backend.enhancement import EnhancementService
from linkfolio.backend.errors import ServiceError
from linkfolio.backend.profiles import ProfileService
from linkfolio.shared.profile_types import EnhancementOptions

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Enhance a LinkedIn profile")
    parser.add_argument(
        "profile",
        help="LinkedIn URL, path to a JSON file, or inline JSON",
    )
    parser.add_argument(
        "--tone",
        choices=["professional", "conversational", "enthusiastic"],
        default="professional",
    )
    parser.add_argument(
        "--focus",
        choices=["technical", "leadership", "creative", "balanced"],
        default="balanced",
    )
    parser.add_argument(
        "--length",
        choices=["concise", "detailed", "comprehensive"],
        default="detailed",
    )
    parser.add_argument(
        "--no-achievements",
        action="store_true",
        help="Do not ask the model to highlight achievements",
    )
    parser.add_argument(
        "--no-skills",
        action="store_true",
        help="Do not ask the model to emphasize skills",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Ask the model to include metrics",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    profile_arg = args.profile
    if not profile_arg.lstrip().startswith(("{", "http")) and Path(profile_arg).is_file():
        profile_arg = Path(profile_arg).read_text(encoding="utf-8")

    options = EnhancementOptions(
        tone=args.tone,
        focus=args.focus,
        length=args.length,
        highlight_achievements=not args.no_achievements,
        emphasize_skills=not args.no_skills,
        include_metrics=args.metrics,
    )

    settings = get_settings()
    service = ProfileService(
        build_profile_fetcher(settings),
        EnhancementService(build_text_generator(settings)),
    )
    try:
        result = service.process_profile(profile_arg, options)
    except ServiceError as exc:
        logger.error("Failed to process profile: %s", exc.message)
        return 1

    print(json.dumps(result.as_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
