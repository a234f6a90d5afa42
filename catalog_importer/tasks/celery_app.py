"""
Celery Application Configuration
"""

import logging

from celery import Celery

from ..config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Create Celery app
app = Celery(
    "catalog_importer",
    broker=settings.broker_url,
    backend=settings.result_backend,
    include=[
        "catalog_importer.tasks.imports",
    ],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    # At-least-once: acknowledge only after the job has run
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Fixed pool sized to the destination's shared rate-limit bucket
    worker_concurrency=settings.import_worker_concurrency,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    broker_connection_retry_on_startup=True,
)

if __name__ == "__main__":
    app.start()
