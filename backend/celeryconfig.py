"""
Celery configuration for the Simlak worker.

Loaded by `celery_app.config_from_object("celeryconfig")` in app/tasks/__init__.py.
Broker and result-backend URLs come from environment variables,
defaulting to localhost for local dev.
"""

import os

# ═══════════════════════════════════════════════════════════
#  Broker & Result Backend
# ═══════════════════════════════════════════════════════════

broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

# ═══════════════════════════════════════════════════════════
#  Serialization: JSON only
# ═══════════════════════════════════════════════════════════

task_serializer = "json"
result_serializer = "json"
accept_content = ["json"]

# ═══════════════════════════════════════════════════════════
#  Timezone
# ═══════════════════════════════════════════════════════════

timezone = "UTC"
enable_utc = True

# ═══════════════════════════════════════════════════════════
#  Task Execution
# ═══════════════════════════════════════════════════════════

task_acks_late = True
task_reject_on_worker_lost = True
worker_prefetch_multiplier = 1

# A full catalog sync pages through thousands of packages
task_soft_time_limit = 600
task_time_limit = 660

result_expires = 86400

worker_send_task_events = False
task_send_sent_event = False

# ═══════════════════════════════════════════════════════════
#  Task Routes
# ═══════════════════════════════════════════════════════════
#   celery -A app.tasks worker -Q catalog
#   celery -A app.tasks worker -Q fulfillment

task_routes = {
    "app.tasks.catalog_tasks.*": {"queue": "catalog"},
    "app.tasks.fulfillment_tasks.*": {"queue": "fulfillment"},
}

task_default_queue = "default"

# ═══════════════════════════════════════════════════════════
#  Beat Schedule
# ═══════════════════════════════════════════════════════════
#   celery -A app.tasks beat

beat_schedule = {
    "sync-partner-catalog": {
        "task": "app.tasks.catalog_tasks.sync_catalog",
        "schedule": float(os.getenv("CATALOG_SYNC_INTERVAL_SECONDS", "86400")),
    },
}
