"""
Sync the pack catalog from RingsDB.

Run this job to pick up newly released packs without opening the
collection page. Existing packs keep their enabled flag.
"""

import asyncio
import logging

from ringsledger.config import settings
from ringsledger.db.database import async_session_factory, init_db
from ringsledger.db.operations import sync_pack_catalog
from ringsledger.services.ringsdb import RingsDBClient

logger = logging.getLogger(__name__)


async def run_sync() -> int:
    """
    Fetch the catalog and merge it into the pack table.

    Returns the number of packs known after the sync.
    """
    logger.info("Syncing pack catalog from %s...", settings.ringsdb_base_url)
    await init_db()

    try:
        async with RingsDBClient() as client:
            catalog = await client.fetch_all_packs()

        async with async_session_factory() as session:
            rows = await sync_pack_catalog(session, catalog, settings.default_enabled_packs)
            await session.commit()
    except Exception as e:
        logger.error("Pack sync failed: %s", e)
        raise

    enabled = sum(1 for row in rows if row.enabled)
    logger.info("Pack catalog synced: %d packs, %d enabled", len(rows), enabled)
    return len(rows)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_sync())


if __name__ == "__main__":
    main()
