"""
Celery application for background SMS delivery.
Redis is both broker and result backend.
"""

from celery import Celery

from taqueria.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "taqueria",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["taqueria.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # SMS sends are short and I/O bound
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Receipts are only kept for inspection
    result_expires=3600,

    # An unreachable broker fails the publish at once, the caller logs it
    task_publish_retry=False,
    broker_connection_retry_on_startup=True,
)


if __name__ == "__main__":
    celery_app.start()
