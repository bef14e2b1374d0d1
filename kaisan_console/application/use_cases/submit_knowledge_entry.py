from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kaisan_console.application import messages
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.domain.errors import FormValidationError
from kaisan_console.infrastructure.database.repositories.knowledge_repository import KnowledgeRepository


@dataclass
class SubmitResult:
    action: str  # "create" or "update"
    message: str
    # payload to send right away; None when the notification was queued
    notification: dict[str, Any] | None


def knowledge_payload(question: str, answer: str, action: str, entry_id: str | None) -> dict[str, Any]:
    return {
        "question": question,
        "answer": answer,
        "action": action,
        "entryId": entry_id or "new",
    }


@dataclass
class SubmitKnowledgeEntryUseCase:
    repo: KnowledgeRepository
    workspace: UserWorkspace
    mode: str = "immediate"

    def execute(
        self, user_id: str, question: str, answer: str, entry_id: str | None = None
    ) -> SubmitResult:
        """
        Create an entry, or update the one being edited.

        Validation happens before any store call. On a store error the form
        in the workspace is left as it was.
        """
        if not question.strip() or not answer.strip():
            raise FormValidationError(messages.FILL_ALL_FIELDS)

        editing_id = entry_id or self.workspace.editing_id
        if editing_id:
            self.repo.update(editing_id, question, answer)
            action, message = "update", messages.ENTRY_UPDATED
        else:
            self.repo.create(question, answer, created_by=user_id)
            action, message = "create", messages.ENTRY_ADDED

        payload = knowledge_payload(question, answer, action, editing_id)
        self.workspace.clear_form()
        if self.mode == "deferred":
            if self.workspace.queue_notification(payload):
                self.workspace.guard.mark_dirty()
            return SubmitResult(action=action, message=message, notification=None)
        return SubmitResult(action=action, message=message, notification=payload)
