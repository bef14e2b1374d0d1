from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import MessageDTO, page_context
from kaisan_console.application.dtos.settings_dto import WhatsappBody, WhatsappView
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.manage_profile import UpdateWhatsappNumberUseCase
from kaisan_console.domain.entities.profile import ProfileEntity
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import StoreError
from kaisan_console.domain.services.phone_format import split_wa_number
from kaisan_console.infrastructure.api.dependencies import (
    get_profile_repo,
    guard_navigation,
    require_session,
)
from kaisan_console.infrastructure.database.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)

ROUTE = "/whatsapp"

router = APIRouter(
    prefix=ROUTE,
    tags=["WhatsApp"],
    responses={
        303: {"description": "See Other - No session, redirected to the login screen"},
        400: {"description": "Bad Request - Area code or number missing"},
        404: {"description": "Not Found - The user has no profile"},
        502: {"description": "Bad Gateway - The record store rejected the operation"},
    },
)


def _view(session: SessionEntity, profile: ProfileEntity | None, message: MessageDTO | None = None) -> WhatsappView:
    view = WhatsappView(**page_context(ROUTE, session.email), message=message)
    if profile is None:
        view.profile_found = False
        return view
    view.country_code, view.area_code, view.number = split_wa_number(profile.wa_number)
    return view


@router.get(
    "",
    response_model=WhatsappView,
    summary="WhatsApp Page",
    description="""
    WhatsApp number of the agent's contact, split into country code
    (display only), area code and local number (`prefix-last4`).
    """,
)
def whatsapp_page(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(guard_navigation),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """Render the WhatsApp number form."""
    try:
        profile = repo.get(session.user_id)
    except StoreError as exc:
        logger.error("Failed to fetch profile of %s: %s", session.user_id, exc)
        return _view(session, None, MessageDTO.error(messages.PROFILE_FETCH_FAILED.format(error=exc)))
    if profile is None:
        return _view(session, None, MessageDTO.error(messages.PROFILE_NOT_FOUND))
    return _view(session, profile)


@router.post(
    "",
    response_model=WhatsappView,
    summary="Save WhatsApp Number",
    description="Store `country + area + number` digits on the user's profile.",
)
def save_whatsapp(
    body: WhatsappBody,
    session: SessionEntity = Depends(require_session),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """Save the WhatsApp number."""
    profile = UpdateWhatsappNumberUseCase(repo=repo).execute(session.user_id, body.area_code, body.number)
    return _view(session, profile, MessageDTO.success(messages.WHATSAPP_SAVED))
