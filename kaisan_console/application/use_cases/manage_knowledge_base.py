"""Knowledge base actions other than submitting the form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.submit_knowledge_entry import knowledge_payload
from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity
from kaisan_console.infrastructure.database.repositories.knowledge_repository import KnowledgeRepository
from kaisan_console.infrastructure.database.row_utils import not_found


@dataclass
class DeleteKnowledgeEntryUseCase:
    repo: KnowledgeRepository
    workspace: UserWorkspace
    mode: str = "immediate"

    def execute(self, entry_id: str) -> None:
        # deferred saves report what was deleted, so read it first
        entry = self.repo.get(entry_id) if self.mode == "deferred" else None
        self.repo.delete(entry_id)
        if self.workspace.editing_id == entry_id:
            self.workspace.clear_form()
        if self.mode == "deferred":
            payload = knowledge_payload(
                entry.question if entry else "", entry.answer if entry else "", "delete", entry_id
            )
            if self.workspace.queue_notification(payload):
                self.workspace.guard.mark_dirty()


@dataclass
class EditKnowledgeEntryUseCase:
    repo: KnowledgeRepository
    workspace: UserWorkspace
    mode: str = "immediate"

    def start(self, entry_id: str) -> KnowledgeEntryEntity:
        """Load an entry into the form."""
        entry = self.repo.get(entry_id)
        if entry is None:
            raise not_found()
        if self.workspace.enter_edit(entry) and self.mode == "deferred":
            self.workspace.guard.mark_dirty()
        return entry

    def cancel(self) -> None:
        """Leave edit mode and discard whatever has not been saved."""
        self.workspace.clear_form()
        if self.mode == "deferred":
            self.workspace.drain_notifications()
            self.workspace.guard.mark_clean()


@dataclass
class PublishKnowledgeBaseUseCase:
    workspace: UserWorkspace

    def execute(self) -> list[dict[str, Any]]:
        """Confirm pending changes; returns the notifications to send."""
        payloads = self.workspace.drain_notifications()
        self.workspace.guard.mark_clean()
        return payloads
