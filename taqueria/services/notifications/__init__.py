"""
SMS provider selection: the mock outbox in development, Twilio in
staging and production.
"""

import logging
from functools import lru_cache

from taqueria.core.config import get_settings
from taqueria.services.notifications.base import BaseNotificationService, SmsReceipt, to_e164
from taqueria.services.notifications.mock import MockNotificationService
from taqueria.services.notifications.real import RealNotificationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_service() -> BaseNotificationService:
    settings = get_settings()
    if settings.is_development:
        service = MockNotificationService(
            country_code=settings.sms_country_code,
            failure_rate=settings.mock_sms_failure_rate,
        )
    else:
        service = RealNotificationService(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_phone_number,
            country_code=settings.sms_country_code,
        )
    logger.info(f"SMS provider: {service.provider_name} ({settings.env_mode.value})")
    return service


def reset_notification_service() -> None:
    get_notification_service.cache_clear()


__all__ = [
    "BaseNotificationService",
    "MockNotificationService",
    "RealNotificationService",
    "SmsReceipt",
    "get_notification_service",
    "reset_notification_service",
    "to_e164",
]
