"""
Twilio SMS provider.

The Twilio client is blocking, so calls run in a worker thread.
"""

import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client as TwilioClient

from taqueria.services.notifications.base import BaseNotificationService, SmsReceipt

logger = logging.getLogger(__name__)


class RealNotificationService(BaseNotificationService):
    """
    Args:
        account_sid: Twilio account SID
        auth_token: Twilio auth token
        from_number: Sending number, E.164
        country_code: Calling code assumed for numbers typed without one
    """

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        country_code: str = "1",
    ):
        super().__init__(country_code)
        self.account_sid = account_sid
        self.from_number = from_number
        self.client: Optional[TwilioClient] = None
        if account_sid and auth_token and from_number:
            self.client = TwilioClient(account_sid, auth_token)
        else:
            logger.warning("Twilio is not fully configured; order SMS will not be sent")

    @property
    def provider_name(self) -> str:
        return "twilio"

    async def _deliver(self, recipient: str, body: str) -> SmsReceipt:
        if self.client is None:
            return SmsReceipt(delivered=False, provider="twilio", recipient=recipient,
                              error="Twilio not configured")
        try:
            message = await asyncio.to_thread(
                self.client.messages.create,
                body=body,
                from_=self.from_number,
                to=recipient,
            )
        except TwilioRestException as e:
            # e.g. 21211 invalid number, 21610 recipient opted out
            logger.error(f"Twilio rejected SMS to {recipient}: [{e.code}] {e.msg}")
            return SmsReceipt(delivered=False, provider="twilio", recipient=recipient,
                              error=f"[{e.code}] {e.msg}")
        except TwilioException as e:
            logger.error(f"Twilio error sending to {recipient}: {e}")
            return SmsReceipt(delivered=False, provider="twilio", recipient=recipient, error=str(e))

        logger.info(f"SMS to {recipient} queued by Twilio ({message.sid}, {message.status})")
        return SmsReceipt(delivered=True, provider="twilio", recipient=recipient, sid=message.sid)

    async def health_check(self) -> bool:
        if self.client is None:
            return False
        try:
            await asyncio.to_thread(self.client.api.accounts(self.account_sid).fetch)
        except TwilioException as e:
            logger.warning(f"Twilio health check failed: {e}")
            return False
        return True
