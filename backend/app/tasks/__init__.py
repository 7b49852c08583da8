"""
Celery application factory.
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.core.config import settings
from app.core.logging import setup_logging

celery_app = Celery("simlak")
celery_app.config_from_object("celeryconfig")


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    # Connecting this signal stops Celery from installing its own handlers
    setup_logging("DEBUG" if settings.APP_ENV == "development" else "INFO")


# Auto-discover tasks in these modules
celery_app.autodiscover_tasks([
    "app.tasks.catalog_tasks",
    "app.tasks.fulfillment_tasks",
])
