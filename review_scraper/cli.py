"""
Command line entry point.

    review-scraper --company "Slack" --start-date 2024-01-01 --end-date 2024-01-31 --source g2
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .config import get_settings
from .errors import InputValidationError
from .storage import output_path, write_reviews
from .scrapers import build_scraper
from .validation import ALLOWED_SOURCES, validate_inputs

logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    """Bad arguments exit with status 1 like every other input error."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"Input error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(description="Scrape dated reviews for a company from G2, Capterra or Trustpilot")
    parser.add_argument("--company", required=True, help="Company name to scrape reviews for")
    parser.add_argument("--start-date", "--startDate", dest="start_date", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", "--endDate", dest="end_date", required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--source", required=True, type=str.lower, choices=ALLOWED_SOURCES,
                        help="Review source (g2, capterra, trustpilot)")
    parser.add_argument("--output-dir", default=None, help="Where to write the JSON file (default: output)")
    parser.add_argument("--headful", action="store_true", help="Show the browser window (Capterra)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        window = validate_inputs(args.company, args.start_date, args.end_date, args.source)
    except InputValidationError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1

    settings = get_settings()
    if args.source == "g2":
        for issue in settings.warnings():
            logger.warning(issue)
    updates = {}
    if args.headful:
        updates["headless"] = False
    if args.output_dir:
        updates["output_dir"] = args.output_dir
    if updates:
        settings = settings.model_copy(update=updates)

    scraper = build_scraper(args.source, settings)
    print(f"Scraping {args.source} reviews for {args.company} from {args.start_date} to {args.end_date}...")

    try:
        outcome = asyncio.run(scraper.scrape(args.company, window))
    except Exception:
        logger.exception("Error during scraping")
        return 1

    out_path = output_path(args.source, args.company, args.start_date, args.end_date, settings.output_dir)
    write_reviews(out_path, outcome.reviews)

    if outcome.failed:
        logger.error(f"Scraping stopped early: {outcome.error}")
        print(f"Saved {len(outcome.reviews)} reviews to {out_path} before the error.", file=sys.stderr)
        return 1

    print(f"Done! Saved {len(outcome.reviews)} reviews to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
