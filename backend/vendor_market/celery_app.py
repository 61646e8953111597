"""Celery application configuration."""

from __future__ import annotations

import logging

from celery import Celery

from vendor_market.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "vendor_market",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["vendor_market.tasks.email"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    broker_connection_retry_on_startup=True,
    # Notifications are best-effort: a failed send is logged, never retried
    task_acks_late=False,
    task_max_retries=0,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=500,
)

logger.info(f"Celery app configured with broker: {settings.CELERY_BROKER_URL}")
