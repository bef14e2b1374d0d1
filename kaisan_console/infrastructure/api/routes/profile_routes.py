from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import MessageDTO, page_context
from kaisan_console.application.dtos.settings_dto import ProfileBody, ProfileView
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.manage_profile import LoadProfileUseCase
from kaisan_console.domain.entities.profile import ProfileEntity
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import StoreError
from kaisan_console.infrastructure.api.dependencies import (
    get_profile_repo,
    guard_navigation,
    require_session,
)
from kaisan_console.infrastructure.database.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)

ROUTE = "/profile"

router = APIRouter(
    prefix=ROUTE,
    tags=["Profile"],
    responses={
        303: {"description": "See Other - No session, redirected to the login screen"},
        502: {"description": "Bad Gateway - The record store rejected the operation"},
    },
)


def _view(session: SessionEntity, profile: ProfileEntity | None, message: MessageDTO | None = None) -> ProfileView:
    view = ProfileView(**page_context(ROUTE, session.email), message=message)
    if profile is not None:
        view.full_name = profile.full_name or ""
        view.birth_date = profile.birth_date
        view.phone = profile.phone or ""
        view.address = profile.address or ""
    return view


@router.get(
    "",
    response_model=ProfileView,
    summary="Profile Page",
    description="""
    Profile of the signed-in user. The profile row is created on the first
    visit when it does not exist yet.
    """,
)
def profile_page(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(guard_navigation),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """Render the profile form."""
    try:
        profile = LoadProfileUseCase(repo=repo).execute(session.user_id)
    except StoreError as exc:
        logger.error("Failed to fetch profile of %s: %s", session.user_id, exc)
        return _view(session, None, MessageDTO.error(messages.PROFILE_FETCH_FAILED.format(error=exc)))
    return _view(session, profile)


@router.post(
    "",
    response_model=ProfileView,
    summary="Update Profile",
    description="Update name, birth date, phone and address. Empty values are stored as null.",
)
def update_profile(
    body: ProfileBody,
    session: SessionEntity = Depends(require_session),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """Update the current user's profile."""
    repo.update(
        session.user_id,
        full_name=body.full_name,
        birth_date=body.birth_date,
        phone=body.phone or None,
        address=body.address or None,
    )
    return _view(session, repo.get(session.user_id), MessageDTO.success(messages.PROFILE_UPDATED))
