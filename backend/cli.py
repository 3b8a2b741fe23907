"""
Estimate cost, timeline and token rewards for an extraction plan.

Exactly one of --properties, --tokens or --usd sets the size of the plan.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from config import CONFIG
from options import PlanOptions
from planner import PlanningEngine
from report import format_result, result_to_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate an extraction plan.")
    parser.add_argument("-p", "--properties", type=str, help="Number of properties to extract")
    parser.add_argument("-t", "--tokens", type=str, help="Token budget to convert into properties")
    parser.add_argument("-u", "--usd", type=str, help="USD budget to convert into properties")
    parser.add_argument(
        "-g", "--data-group",
        type=str,
        default=CONFIG.default_data_group,
        help=f"Data group ({', '.join(CONFIG.data_groups)})"
    )
    parser.add_argument(
        "-e", "--extracted-properties",
        type=str,
        default="0",
        help="Properties already extracted before this plan"
    )
    parser.add_argument("-w", "--max-workers", type=str, help="Lifetime cap on workers hired")
    parser.add_argument(
        "--max-hires-per-week",
        type=str,
        help=f"New hires allowed per week (default {CONFIG.labor.max_new_hires_per_week})"
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser


def options_from_args(args: argparse.Namespace) -> PlanOptions:
    """Validate parsed arguments; raises ``ValidationError`` on bad input."""
    return PlanOptions(
        properties=args.properties,
        tokens=args.tokens,
        usd=args.usd,
        data_group=args.data_group,
        extracted_properties=args.extracted_properties,
        max_total_workers=args.max_workers,
        max_new_hires_per_week=args.max_hires_per_week
    )


def parse_options(argv: Optional[List[str]] = None) -> PlanOptions:
    return options_from_args(build_parser().parse_args(argv))


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else str(exc)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        options = options_from_args(args)
    except ValidationError as exc:
        print(f"Error: {_first_error(exc)}", file=sys.stderr)
        return 1

    logger.info(f"Planning {options.mode} request for data group {options.data_group}")
    result = PlanningEngine().plan_from_options(options)

    if args.json:
        print(result_to_json(result))
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
