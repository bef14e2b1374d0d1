from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from kaisan_console.application import messages
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.manage_knowledge_base import (
    DeleteKnowledgeEntryUseCase,
    EditKnowledgeEntryUseCase,
    PublishKnowledgeBaseUseCase,
)
from kaisan_console.application.use_cases.submit_knowledge_entry import SubmitKnowledgeEntryUseCase
from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity
from kaisan_console.domain.errors import FormValidationError, StoreError


def _entry(entry_id="e1", question="Horário?", answer="8h às 18h"):
    return KnowledgeEntryEntity(id=entry_id, question=question, answer=answer, created_at=datetime.now(UTC))


@pytest.mark.parametrize("question,answer", [("", "a"), ("q", ""), ("   ", "a"), ("q", "  ")])
def test_submit_rejects_blank_fields_without_store_call(question, answer):
    repo = MagicMock()
    uc = SubmitKnowledgeEntryUseCase(repo=repo, workspace=UserWorkspace("u1"))
    with pytest.raises(FormValidationError) as info:
        uc.execute("u1", question, answer)
    assert str(info.value) == messages.FILL_ALL_FIELDS
    assert repo.method_calls == []


def test_submit_creates_and_returns_immediate_payload():
    repo = MagicMock()
    ws = UserWorkspace("u1")
    result = SubmitKnowledgeEntryUseCase(repo=repo, workspace=ws).execute("u1", "q", "a")
    repo.create.assert_called_once_with("q", "a", created_by="u1")
    assert result.action == "create"
    assert result.message == messages.ENTRY_ADDED
    assert result.notification == {"question": "q", "answer": "a", "action": "create", "entryId": "new"}
    assert not ws.guard.is_dirty


def test_submit_updates_entry_in_edit_mode_and_clears_form():
    repo = MagicMock()
    ws = UserWorkspace("u1")
    ws.enter_edit(_entry())
    result = SubmitKnowledgeEntryUseCase(repo=repo, workspace=ws).execute("u1", "q2", "a2")
    repo.update.assert_called_once_with("e1", "q2", "a2")
    repo.create.assert_not_called()
    assert result.notification["entryId"] == "e1"
    assert result.notification["action"] == "update"
    assert ws.editing_id is None
    assert ws.question == ""


def test_submit_store_error_keeps_form():
    repo = MagicMock()
    repo.update.side_effect = StoreError("boom")
    ws = UserWorkspace("u1")
    ws.enter_edit(_entry())
    with pytest.raises(StoreError):
        SubmitKnowledgeEntryUseCase(repo=repo, workspace=ws).execute("u1", "q2", "a2")
    assert ws.editing_id == "e1"


def test_deferred_submit_queues_and_marks_dirty():
    ws = UserWorkspace("u1")
    result = SubmitKnowledgeEntryUseCase(repo=MagicMock(), workspace=ws, mode="deferred").execute("u1", "q", "a")
    assert result.notification is None
    assert ws.guard.is_dirty
    assert ws.pending == [{"question": "q", "answer": "a", "action": "create", "entryId": "new"}]


def test_edit_missing_entry_is_not_found():
    repo = MagicMock()
    repo.get.return_value = None
    with pytest.raises(StoreError) as info:
        EditKnowledgeEntryUseCase(repo=repo, workspace=UserWorkspace("u1")).start("nope")
    assert info.value.not_found


def test_cancel_in_deferred_mode_discards_pending():
    repo = MagicMock()
    repo.get.return_value = _entry()
    ws = UserWorkspace("u1")
    uc = EditKnowledgeEntryUseCase(repo=repo, workspace=ws, mode="deferred")
    uc.start("e1")
    assert ws.guard.is_dirty
    ws.queue_notification({"action": "create"})
    uc.cancel()
    assert ws.editing_id is None
    assert ws.pending == []
    assert not ws.guard.is_dirty


def test_delete_clears_form_of_deleted_entry():
    repo = MagicMock()
    ws = UserWorkspace("u1")
    ws.enter_edit(_entry())
    DeleteKnowledgeEntryUseCase(repo=repo, workspace=ws).execute("e1")
    repo.delete.assert_called_once_with("e1")
    repo.get.assert_not_called()
    assert ws.editing_id is None


def test_deferred_delete_queues_payload():
    repo = MagicMock()
    repo.get.return_value = _entry()
    ws = UserWorkspace("u1")
    DeleteKnowledgeEntryUseCase(repo=repo, workspace=ws, mode="deferred").execute("e1")
    assert ws.pending[0]["action"] == "delete"
    assert ws.pending[0]["entryId"] == "e1"
    assert ws.guard.is_dirty


def test_publish_drains_queue_and_marks_clean():
    ws = UserWorkspace("u1")
    ws.queue_notification({"action": "create"})
    ws.queue_notification({"action": "update"})
    ws.guard.mark_dirty()
    payloads = PublishKnowledgeBaseUseCase(workspace=ws).execute()
    assert [p["action"] for p in payloads] == ["create", "update"]
    assert ws.pending == []
    assert not ws.guard.is_dirty
