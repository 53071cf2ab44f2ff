"""
Mock SMS provider for development: messages land in an in-process
outbox and the log instead of a carrier.
"""

import asyncio
import logging
import random
import uuid

from taqueria.services.notifications.base import BaseNotificationService, SmsReceipt

logger = logging.getLogger(__name__)


class MockNotificationService(BaseNotificationService):

    def __init__(
        self,
        country_code: str = "1",
        failure_rate: float = 0.0,
        latency: tuple[float, float] = (0.0, 0.0),
    ):
        super().__init__(country_code)
        self.failure_rate = failure_rate
        self.latency = latency
        self.outbox: list[SmsReceipt] = []
        self.bodies: dict[str, str] = {}
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _deliver(self, recipient: str, body: str) -> SmsReceipt:
        low, high = self.latency
        if high > 0:
            await asyncio.sleep(random.uniform(low, high))

        if self.failure_rate and random.random() < self.failure_rate:
            logger.warning(f"Simulated SMS failure to {recipient}")
            return SmsReceipt(delivered=False, provider="mock", recipient=recipient,
                              error="Simulated carrier failure")

        receipt = SmsReceipt(
            delivered=True,
            provider="mock",
            recipient=recipient,
            sid=f"SM{uuid.uuid4().hex[:32]}",
        )
        self.outbox.append(receipt)
        self.bodies[receipt.sid] = body
        logger.info(f"[mock sms] {recipient}: {body}")
        return receipt

    async def health_check(self) -> bool:
        return True
