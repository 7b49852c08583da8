"""
Celery tasks: periodic partner catalog sync.
"""

import asyncio

from app.catalog.sync import sync_packages
from app.core.logging import get_logger
from app.db.session import task_session
from app.esim_access.client import get_esim_client
from app.tasks import celery_app

logger = get_logger(__name__)


async def _sync(location_code: str | None) -> dict[str, int]:
    async with get_esim_client() as client, task_session() as db:
        result = await sync_packages(db, client, location_code=location_code)
    return result.as_dict()


@celery_app.task(name="app.tasks.catalog_tasks.sync_catalog")
def sync_catalog(location_code: str | None = None) -> dict[str, int]:
    """Pull the partner catalog and refresh packages and countries."""
    logger.info("Catalog sync task started", location_code=location_code)
    return asyncio.run(_sync(location_code))
