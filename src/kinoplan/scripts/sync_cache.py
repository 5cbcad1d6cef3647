"""Keep a local catalog cache in sync with the server."""

import argparse
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from kinoplan.client import CacheSyncClient, LocalStore, client_settings

logger = logging.getLogger(__name__)


async def main(once: bool) -> None:
    store = LocalStore.from_url(client_settings.database_url)
    await store.create_schema()
    client = CacheSyncClient(store)

    try:
        state = await client.poll()
        counts = await store.counts()
        logger.info(
            f"Cache {state.value}: {counts['cinemas']} cinemas, {counts['movies']} movies, "
            f"{counts['show_times']} showtimes"
        )
        if once:
            return

        scheduler = AsyncIOScheduler()
        client.schedule(scheduler)
        scheduler.start()
        logger.info(f"Polling every {client_settings.poll_interval_minutes} minutes")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)
    finally:
        await store.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sync the local catalog cache")
    parser.add_argument("--once", action="store_true", help="Poll once and exit")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    asyncio.run(main(args.once))
