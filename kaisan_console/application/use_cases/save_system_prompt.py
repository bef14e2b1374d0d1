from __future__ import annotations

from dataclasses import dataclass

from kaisan_console.application import messages
from kaisan_console.domain.entities.system_prompt import SystemPromptEntity
from kaisan_console.domain.errors import FormValidationError
from kaisan_console.infrastructure.database.repositories.system_prompt_repository import (
    SystemPromptRepository,
)


@dataclass
class SaveSystemPromptUseCase:
    repo: SystemPromptRepository

    def execute(
        self, user_id: str, prompt: str, prompt_id: str | None = None
    ) -> tuple[SystemPromptEntity | None, str]:
        """
        Save the system prompt in place.

        The existing row is updated by id; a row is inserted only when none
        exists yet. Returns what the store holds afterwards and the message.
        """
        if not prompt.strip():
            raise FormValidationError(messages.FILL_PROMPT)

        if prompt_id is None:
            current = self.repo.get_current()
            prompt_id = current.id if current else None

        if prompt_id:
            self.repo.update(prompt_id, prompt)
            message = messages.PROMPT_UPDATED
        else:
            self.repo.create(prompt, created_by=user_id)
            message = messages.PROMPT_ADDED
        return self.repo.get_current(), message
