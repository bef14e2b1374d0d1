from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from kaisan_console.application import messages
from kaisan_console.domain.errors import FormValidationError, WebhookError
from kaisan_console.domain.services.phone_format import DEFAULT_COUNTRY_CODE, mask_phone, sanitize_digits
from kaisan_console.infrastructure.notifications.webhook_notifier import (
    WebhookNotifier,
    reset_memory_webhook_url,
)

logger = logging.getLogger(__name__)


def default_country_code() -> str:
    return os.getenv("DEFAULT_COUNTRY_CODE", DEFAULT_COUNTRY_CODE)


def resolve_country_code(country_code: str | None) -> str:
    """Country code sent with a memory reset: the digits typed, else the configured default."""
    return sanitize_digits(country_code, 3) or default_country_code()


@dataclass
class ResetMemoryUseCase:
    """Ask the agent to forget the conversation held with a phone number."""

    notifier: WebhookNotifier

    async def execute(
        self, area_code: str, phone_number: str, country_code: str | None = None
    ) -> str:
        area = sanitize_digits(area_code, 2)
        number = sanitize_digits(phone_number, 9)
        if not area or not number:
            raise FormValidationError(messages.FILL_ALL_PHONE_FIELDS)

        phone = f"{resolve_country_code(country_code)}{area}{number}"
        try:
            await self.notifier.post(reset_memory_webhook_url(), {"phone": phone})
        except WebhookError as exc:
            logger.error("Memory reset for %s failed: %s", mask_phone(phone), exc)
            raise WebhookError(messages.RESET_MEMORY_FAILED, status_code=exc.status_code) from exc
        return phone
