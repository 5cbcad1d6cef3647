"""Run one scrape of the registered cinemas from the command line."""

import argparse
import asyncio
import logging

from kinoplan.config import settings
from kinoplan.scrapers import SCRAPER_REGISTRY, get_scrapers
from kinoplan.tasks.scrape_job import run_scrape_all

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape cinema showtimes and export the catalog")
    parser.add_argument(
        "--only",
        nargs="+",
        choices=sorted(SCRAPER_REGISTRY),
        help="Scrape only these cinemas",
    )
    parser.add_argument("--no-export", action="store_true", help="Skip the catalog export")
    parser.add_argument("--no-enrich", action="store_true", help="Skip TMDb enrichment")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    summary = await run_scrape_all(
        get_scrapers(args.only),
        export=not args.no_export,
        enrich=not args.no_enrich,
    )
    if summary.failed_sources:
        logger.warning(f"Failed sources: {', '.join(summary.failed_sources)}")
    if summary.exported_version:
        logger.info(f"Catalog version {summary.exported_version.isoformat()}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s %(message)s")
    raise SystemExit(asyncio.run(main()))
