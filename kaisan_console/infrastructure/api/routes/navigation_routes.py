from __future__ import annotations

from fastapi import APIRouter, Depends

from kaisan_console.application.dtos.common_dto import NavigationState
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.infrastructure.api.dependencies import get_workspace

router = APIRouter(prefix="/navigation", tags=["Navigation"])


@router.get(
    "",
    response_model=NavigationState,
    summary="Navigation State",
    description="""
    Route last rendered by the user and whether unsaved changes exist.

    Clients query this before a browser unload; when `confirm_unload` is
    true the unload must be confirmed by the user.
    """,
)
def navigation_state(workspace: UserWorkspace = Depends(get_workspace)):
    """Report the unsaved-changes state of the current user."""
    return NavigationState(
        route=workspace.route,
        dirty=workspace.guard.is_dirty,
        confirm_unload=workspace.guard.confirm_unload(),
    )
