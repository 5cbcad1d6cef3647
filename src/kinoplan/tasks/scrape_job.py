"""Scheduled scrape job that fetches showings for all registered cinemas."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinoplan.config import settings
from kinoplan.database import AsyncSessionLocal
from kinoplan.models import Cinema, ShowTime
from kinoplan.scrapers import get_scrapers
from kinoplan.scrapers.base import BaseScraper
from kinoplan.scrapers.models import CinemaConfig, RawShowing
from kinoplan.services.catalog_exporter import export_catalog
from kinoplan.services.entity_resolver import EntityResolver
from kinoplan.services.movie_enricher import enrich_movies

logger = logging.getLogger(__name__)


@dataclass
class ScrapeSummary:
    """Outcome of one scrape over all adapters."""

    successes: int = 0
    failures: int = 0
    showtimes_created: int = 0
    failed_sources: list[str] = field(default_factory=list)
    exported_version: datetime | None = None


class ScrapeRun:
    """
    Unit of work for a single adapter run.

    Holds the run's session and resolver. Everything resolved through it is
    committed or discarded together by an explicit ``commit``/``rollback``.
    """

    def __init__(
        self,
        db: AsyncSession,
        cinema: CinemaConfig,
        resolver: EntityResolver,
        now: datetime,
    ) -> None:
        self.db = db
        self.cinema = cinema
        self.resolver = resolver
        self.now = now
        self.created: list[ShowTime] = []
        self.skipped = 0

    def accepts(self, raw_showing: RawShowing) -> bool:
        """Drop showings that already started or cannot be booked or reserved."""
        if raw_showing.is_past(self.now) or raw_showing.is_unavailable():
            self.skipped += 1
            return False
        return True

    async def resolve(self, raw_showing: RawShowing) -> ShowTime | None:
        showtime = await self.resolver.resolve(raw_showing, self.cinema)
        if showtime is not None:
            self.created.append(showtime)
        return showtime

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        self.created.clear()
        await self.db.rollback()


async def register_cinemas(
    session_factory: async_sessionmaker[AsyncSession],
    configs: list[CinemaConfig],
) -> None:
    """Insert or refresh the cinema row of every registered adapter."""
    async with session_factory() as db:
        for config in configs:
            cinema = await db.get(Cinema, config.id)
            if cinema is None:
                cinema = Cinema(id=config.id)
                db.add(cinema)
            cinema.display_name = config.display_name
            cinema.website = config.website
            cinema.color = config.color
            cinema.reliable_metadata = config.reliable_metadata
            cinema.has_shop = config.has_shop
        await db.commit()


async def purge_past_showtimes(
    session_factory: async_sessionmaker[AsyncSession],
    cutoff: datetime,
) -> int:
    """Delete showtimes that started before ``cutoff``."""
    async with session_factory() as db:
        result = await db.execute(delete(ShowTime).where(ShowTime.start_time < cutoff))
        await db.commit()
    purged = result.rowcount or 0
    if purged:
        logger.info(f"Purged {purged} showtimes older than {cutoff}")
    return purged


async def run_scraper(
    scraper: BaseScraper,
    session_factory: async_sessionmaker[AsyncSession],
    movie_lock: asyncio.Lock,
    now: datetime,
) -> int | None:
    """
    Run one adapter inside its own transaction.

    Returns:
        Number of showtimes committed, or None if the run failed and was
        rolled back
    """
    async with session_factory() as db:
        resolver = EntityResolver(db, session_factory, movie_lock, scraper.special_event_markers)
        run = ScrapeRun(db, scraper.cinema, resolver, now)
        try:
            await asyncio.wait_for(scraper.scrape(run), timeout=settings.scrape_run_timeout)
            await run.commit()
        except Exception as e:
            logger.error(f"Error scraping {scraper.name}: {e}", exc_info=True)
            try:
                await run.rollback()
            except Exception as rollback_error:
                logger.warning(f"Rollback failed for {scraper.name}: {rollback_error}")
            return None

    logger.info(
        f"Scraped {scraper.name}: {len(run.created)} new showings, "
        f"{run.skipped} past or unavailable skipped"
    )
    return len(run.created)


async def run_scrape_all(
    scrapers: list[BaseScraper] | None = None,
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    export: bool = True,
    enrich: bool = True,
) -> ScrapeSummary:
    """Scrape every registered adapter, then enrich and export the catalog.

    Adapters run with bounded parallelism; a failing adapter only loses its
    own run. Creates its own DB sessions so it can be called from the
    scheduler or at startup without depending on a request context.
    """
    if scrapers is None:
        scrapers = get_scrapers()

    summary = ScrapeSummary()
    if not scrapers:
        logger.warning("No scrapers registered, skipping scrape")
        return summary

    now = datetime.now(UTC)
    logger.info(f"Starting scrape for {len(scrapers)} cinemas")

    await register_cinemas(session_factory, [scraper.cinema for scraper in scrapers])
    await purge_past_showtimes(
        session_factory, now - timedelta(hours=settings.showtime_retention_hours)
    )

    movie_lock = asyncio.Lock()
    semaphore = asyncio.Semaphore(max(1, settings.scrape_concurrency))

    async def bounded(scraper: BaseScraper) -> int | None:
        async with semaphore:
            return await run_scraper(scraper, session_factory, movie_lock, now)

    results = await asyncio.gather(*(bounded(scraper) for scraper in scrapers))

    for scraper, created in zip(scrapers, results):
        if created is None:
            summary.failures += 1
            summary.failed_sources.append(scraper.name)
        else:
            summary.successes += 1
            summary.showtimes_created += created

    logger.info(
        f"Scrape complete: {summary.successes} succeeded, {summary.failures} failed, "
        f"{summary.showtimes_created} new showings created"
    )

    if enrich and settings.tmdb_api_key:
        await enrich_movies(session_factory)

    if export:
        try:
            async with session_factory() as db:
                snapshot = await export_catalog(db, settings.export_dir)
            summary.exported_version = snapshot.version
        except Exception as e:
            logger.error(f"Catalog export failed: {e}", exc_info=True)

    return summary
