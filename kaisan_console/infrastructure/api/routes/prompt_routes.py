from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import MessageDTO, page_context
from kaisan_console.application.dtos.settings_dto import SystemPromptBody, SystemPromptView
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.save_system_prompt import SaveSystemPromptUseCase
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import StoreError
from kaisan_console.infrastructure.api.dependencies import (
    get_prompt_repo,
    guard_navigation,
    require_session,
)
from kaisan_console.infrastructure.database.repositories.system_prompt_repository import (
    SystemPromptRepository,
)

logger = logging.getLogger(__name__)

ROUTE = "/prompt"

router = APIRouter(
    prefix=ROUTE,
    tags=["System Prompt"],
    responses={
        303: {"description": "See Other - No session, redirected to the login screen"},
        400: {"description": "Bad Request - Empty prompt"},
        502: {"description": "Bad Gateway - The record store rejected the operation"},
    },
)


@router.get(
    "",
    response_model=SystemPromptView,
    summary="System Prompt Page",
    description="Current system prompt of the agent. Empty until the first save.",
)
def prompt_page(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(guard_navigation),
    repo: SystemPromptRepository = Depends(get_prompt_repo),
):
    """Render the system prompt form."""
    view = SystemPromptView(**page_context(ROUTE, session.email))
    try:
        current = repo.get_current()
    except StoreError as exc:
        logger.error("Failed to fetch system prompt: %s", exc)
        view.message = MessageDTO.error(messages.FETCH_FAILED.format(error=exc))
        return view
    if current is not None:
        view.prompt = current.prompt
        view.prompt_id = current.id
    return view


@router.post(
    "",
    response_model=SystemPromptView,
    summary="Save System Prompt",
    description="""
    Save the system prompt.

    The existing row is updated in place (same id); the first save inserts it.
    The response holds what the store returns after the write.
    """,
)
def save_prompt(
    body: SystemPromptBody,
    session: SessionEntity = Depends(require_session),
    repo: SystemPromptRepository = Depends(get_prompt_repo),
):
    """Create or update the system prompt."""
    saved, text = SaveSystemPromptUseCase(repo=repo).execute(session.user_id, body.prompt, body.id)
    return SystemPromptView(
        **page_context(ROUTE, session.email),
        message=MessageDTO.success(text),
        prompt=saved.prompt if saved else body.prompt,
        prompt_id=saved.id if saved else None,
    )
