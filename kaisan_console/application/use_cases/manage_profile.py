from __future__ import annotations

import logging
from dataclasses import dataclass

from kaisan_console.application import messages
from kaisan_console.domain.entities.profile import ProfileEntity
from kaisan_console.domain.errors import FormValidationError
from kaisan_console.domain.services.phone_format import (
    compose_wa_number,
    sanitize_digits,
    split_wa_number,
    unformat_number,
)
from kaisan_console.infrastructure.database.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass
class LoadProfileUseCase:
    repo: ProfileRepository

    def execute(self, user_id: str) -> ProfileEntity:
        """Return the user's profile, creating the empty row on first visit."""
        profile = self.repo.get(user_id)
        if profile is not None:
            return profile
        logger.info("Creating profile for user %s", user_id)
        self.repo.create_default(user_id)
        return ProfileEntity(id=user_id)


@dataclass
class UpdateWhatsappNumberUseCase:
    repo: ProfileRepository

    def execute(self, user_id: str, area_code: str, number: str) -> ProfileEntity | None:
        """
        Store ``country + area + local`` digits as the WhatsApp number.

        The country code is not editable here: it comes from the number
        already stored, or the default when there is none.
        """
        area = sanitize_digits(area_code, 2)
        local = unformat_number(number)
        if not area or not local:
            raise FormValidationError(messages.FILL_ALL_FIELDS)

        current = self.repo.get(user_id)
        country, _, _ = split_wa_number(current.wa_number if current else None)
        self.repo.update(user_id, wa_number=compose_wa_number(country, area, local))
        return self.repo.get(user_id)
