from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from kaisan_console.application import messages
from kaisan_console.application.use_cases.manage_profile import (
    LoadProfileUseCase,
    UpdateWhatsappNumberUseCase,
)
from kaisan_console.application.use_cases.save_system_prompt import SaveSystemPromptUseCase
from kaisan_console.application.use_cases.update_password import UpdatePasswordUseCase
from kaisan_console.domain.entities.profile import ProfileEntity
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.entities.system_prompt import SystemPromptEntity
from kaisan_console.domain.errors import AuthServiceError, FormValidationError

NOW = datetime.now(UTC)


def test_prompt_blank_is_rejected_before_store():
    repo = MagicMock()
    with pytest.raises(FormValidationError) as info:
        SaveSystemPromptUseCase(repo=repo).execute("u1", "   ")
    assert str(info.value) == messages.FILL_PROMPT
    assert repo.method_calls == []


def test_prompt_first_save_inserts():
    repo = MagicMock()
    repo.get_current.side_effect = [None, SystemPromptEntity(id="p1", prompt="Olá", created_at=NOW)]
    saved, text = SaveSystemPromptUseCase(repo=repo).execute("u1", "Olá")
    repo.create.assert_called_once_with("Olá", created_by="u1")
    assert saved.id == "p1"
    assert text == messages.PROMPT_ADDED


def test_prompt_existing_row_is_updated_in_place():
    repo = MagicMock()
    repo.get_current.return_value = SystemPromptEntity(id="p1", prompt="novo", created_at=NOW)
    saved, text = SaveSystemPromptUseCase(repo=repo).execute("u1", "novo", prompt_id="p1")
    repo.update.assert_called_once_with("p1", "novo")
    repo.create.assert_not_called()
    assert saved.id == "p1"
    assert text == messages.PROMPT_UPDATED


def test_load_profile_creates_missing_row():
    repo = MagicMock()
    repo.get.return_value = None
    profile = LoadProfileUseCase(repo=repo).execute("u1")
    repo.create_default.assert_called_once_with("u1")
    assert profile == ProfileEntity(id="u1")


def test_whatsapp_requires_area_and_number():
    repo = MagicMock()
    with pytest.raises(FormValidationError):
        UpdateWhatsappNumberUseCase(repo=repo).execute("u1", "", "98765-4321")
    with pytest.raises(FormValidationError):
        UpdateWhatsappNumberUseCase(repo=repo).execute("u1", "21", "")
    assert repo.method_calls == []


def test_whatsapp_keeps_stored_country_code():
    repo = MagicMock()
    repo.get.return_value = ProfileEntity(id="u1", wa_number="1415555512345")
    UpdateWhatsappNumberUseCase(repo=repo).execute("u1", "(2)1", "98765-4321")
    repo.update.assert_called_once_with("u1", wa_number="1421987654321")


def test_whatsapp_defaults_country_code():
    repo = MagicMock()
    repo.get.return_value = ProfileEntity(id="u1")
    UpdateWhatsappNumberUseCase(repo=repo).execute("u1", "21", "98765-4321")
    repo.update.assert_called_once_with("u1", wa_number="5521987654321")


@pytest.mark.parametrize(
    "new,confirm,expected",
    [
        ("abcdef", "abcdeg", messages.PASSWORDS_DO_NOT_MATCH),
        ("abc", "abc", messages.PASSWORD_TOO_SHORT),
        # mismatch is reported before length
        ("abc", "abd", messages.PASSWORDS_DO_NOT_MATCH),
    ],
)
def test_password_validation(new, confirm, expected):
    auth = MagicMock()
    with pytest.raises(FormValidationError) as info:
        UpdatePasswordUseCase(auth=auth).execute(None, new, confirm)
    assert str(info.value) == expected
    auth.update_password.assert_not_called()


def test_password_update_needs_session():
    with pytest.raises(AuthServiceError):
        UpdatePasswordUseCase(auth=MagicMock()).execute(None, "segredo", "segredo")


def test_password_update_calls_auth():
    auth = MagicMock()
    session = SessionEntity("u1", "a@b.c", "tok", "ref")
    UpdatePasswordUseCase(auth=auth).execute(session, "segredo", "segredo")
    auth.update_password.assert_called_once_with(session, "segredo")
