from __future__ import annotations

from dataclasses import dataclass

from kaisan_console.application import messages
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import AuthServiceError, FormValidationError
from kaisan_console.infrastructure.database.supabase_client import SupabaseAuthAdapter

MIN_PASSWORD_LENGTH = 6


@dataclass
class UpdatePasswordUseCase:
    auth: SupabaseAuthAdapter

    @staticmethod
    def validate(new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise FormValidationError(messages.PASSWORDS_DO_NOT_MATCH)
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise FormValidationError(messages.PASSWORD_TOO_SHORT)

    def execute(self, session: SessionEntity | None, new_password: str, confirm_password: str) -> None:
        self.validate(new_password, confirm_password)
        if session is None:
            raise AuthServiceError("Auth session missing!")
        self.auth.update_password(session, new_password)
