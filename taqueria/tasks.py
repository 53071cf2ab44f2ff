"""
Celery Tasks
Order status SMS, delivered off the request path.
"""

import asyncio
import logging
from dataclasses import asdict

from taqueria.celery_worker import celery_app
from taqueria.services.notifications import get_notification_service

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    retry_backoff=True,
)
def send_sms_notification(self, phone: str, message: str) -> dict:
    """
    Deliver one order status message.

    A number that cannot be routed fails immediately; a provider failure
    for a routable number is retried with backoff.
    """
    service = get_notification_service()
    receipt = asyncio.run(service.send_sms(phone, message))

    if receipt.delivered:
        logger.info(f"Task {self.request.id}: SMS delivered to {receipt.recipient} ({receipt.sid})")
    elif receipt.recipient is None:
        logger.warning(f"Task {self.request.id}: {receipt.error}")
    else:
        logger.warning(
            f"Task {self.request.id}: SMS to {receipt.recipient} failed "
            f"(attempt {self.request.retries + 1}): {receipt.error}"
        )
        if self.request.retries < self.max_retries:
            raise self.retry()

    return asdict(receipt)
