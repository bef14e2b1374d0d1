from __future__ import annotations

from fastapi import APIRouter, Depends

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import MessageDTO, page_context
from kaisan_console.application.dtos.settings_dto import ResetMemoryBody, ResetMemoryView
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.reset_memory import (
    ResetMemoryUseCase,
    default_country_code,
    resolve_country_code,
)
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.infrastructure.api.dependencies import get_notifier, guard_navigation, require_session
from kaisan_console.infrastructure.notifications.webhook_notifier import WebhookNotifier

ROUTE = "/reset-memory"

router = APIRouter(
    prefix=ROUTE,
    tags=["Agent Memory"],
    responses={
        303: {"description": "See Other - No session, redirected to the login screen"},
        400: {"description": "Bad Request - Area code or number missing"},
        502: {"description": "Bad Gateway - The memory reset webhook failed"},
    },
)


@router.get(
    "",
    response_model=ResetMemoryView,
    summary="Reset Memory Page",
    description="Form that clears the agent's message history for one phone number.",
)
def reset_memory_page(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(guard_navigation),
):
    """Render the memory reset form."""
    return ResetMemoryView(**page_context(ROUTE, session.email), country_code=default_country_code())


@router.post(
    "",
    response_model=ResetMemoryView,
    summary="Reset Agent Memory",
    description="""
    Ask the agent to forget the conversation with a phone number.

    **Request Requirements:**
    - Area code: up to 2 digits
    - Phone number: up to 9 digits
    - Country code: optional, defaults to the configured one
    """,
)
async def reset_memory(
    body: ResetMemoryBody,
    session: SessionEntity = Depends(require_session),
    notifier: WebhookNotifier = Depends(get_notifier),
):
    """Call the memory reset webhook."""
    await ResetMemoryUseCase(notifier=notifier).execute(
        body.area_code, body.phone_number, country_code=body.country_code
    )
    # the phone fields are cleared after a successful request
    return ResetMemoryView(
        **page_context(ROUTE, session.email),
        message=MessageDTO.success(messages.RESET_MEMORY_SENT),
        country_code=resolve_country_code(body.country_code),
    )
