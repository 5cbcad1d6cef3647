"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI

from kinoplan.api.routes import catalog, health
from kinoplan.config import settings
from kinoplan.tasks.scrape_job import run_scrape_all

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure and start the scheduler
    scheduler = AsyncIOScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_scrape_all,
        trigger=CronTrigger(hour=settings.scrape_hour, minute=0),
        id="daily_scrape",
        name="Daily scrape and catalog export",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, daily scrape registered for {settings.scrape_hour:02d}:00")

    # Fire a one-off startup scrape in the background
    startup_scrape = asyncio.create_task(run_scrape_all())
    logger.info("Startup scrape triggered in background")

    yield

    # Shutdown: stop the scheduler gracefully
    startup_scrape.cancel()
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")


# Create FastAPI app
app = FastAPI(
    title="Kinoplan API",
    description="Showtime aggregator for Hannover cinemas",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(catalog.router, prefix="/api", tags=["catalog"])
