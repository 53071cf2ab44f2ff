"""
Customer SMS Provider Interface

Orders keep the phone number exactly as the customer typed it
("(555) 123-4567"); providers need E.164. `send_sms` normalizes the
number once and hands the provider a clean recipient.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class SmsReceipt:
    """Outcome of one SMS delivery attempt."""
    delivered: bool
    provider: str
    recipient: Optional[str] = None
    sid: Optional[str] = None
    error: Optional[str] = None


def to_e164(phone: str, country_code: str = "1") -> Optional[str]:
    """
    Recipient in E.164 form, or None when the number is unusable.

    Example:
        >>> to_e164("(555) 123-4567")
        '+15551234567'
    """
    if phone.strip().startswith("+"):
        digits = re.sub(r"\D", "", phone)
        return f"+{digits}" if len(digits) >= 8 else None
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"+{country_code}{digits}"
    if len(digits) == 11 and digits.startswith(country_code):
        return f"+{digits}"
    return None


class BaseNotificationService(ABC):
    """SMS provider used for order status messages."""

    def __init__(self, country_code: str = "1"):
        self.country_code = country_code

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    async def _deliver(self, recipient: str, body: str) -> SmsReceipt:
        """Send `body` to an E.164 `recipient`."""

    async def send_sms(self, phone: str, body: str) -> SmsReceipt:
        recipient = to_e164(phone, self.country_code)
        if recipient is None:
            return SmsReceipt(
                delivered=False,
                provider=self.provider_name,
                error=f"Cannot route SMS to {phone!r}",
            )
        return await self._deliver(recipient, body)

    @abstractmethod
    async def health_check(self) -> bool:
        pass
