"""
Celery tasks: deferred eSIM collection for orders whose profiles were
still provisioning when fulfillment finished.
"""

import asyncio
import uuid

from app.core.errors import EsimAccessError
from app.core.logging import get_logger
from app.db.session import task_session
from app.esim_access.client import get_esim_client
from app.services import fulfillment as fulfillment_service
from app.tasks import celery_app

logger = get_logger(__name__)


async def _fetch(order_id: uuid.UUID) -> dict[str, int]:
    async with get_esim_client() as client, task_session() as db:
        return await fulfillment_service.fetch_order_esims(db, order_id, client=client)


@celery_app.task(
    bind=True,
    name="app.tasks.fulfillment_tasks.fetch_order_esims",
    max_retries=5,
    default_retry_delay=60,
    autoretry_for=(EsimAccessError,),
    retry_backoff=True,
    retry_backoff_max=900,
)
def fetch_order_esims(self, order_id: str) -> dict[str, int]:
    """
    Query the partner for the order's profiles and store new ones.

    Retried with backoff while the partner is unreachable or the
    profiles are still being provisioned.
    """
    result = asyncio.run(_fetch(uuid.UUID(order_id)))
    if result["fetched"] == 0 and self.request.retries < self.max_retries:
        logger.info("Profiles not ready, retrying", order_id=order_id, attempt=self.request.retries)
        raise self.retry()
    logger.info("Deferred eSIM fetch finished", order_id=order_id, attempt=self.request.retries, **result)
    return result
