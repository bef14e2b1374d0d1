from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kaisan_console.application.services.workspace_registry import UserWorkspace, WorkspaceRegistry
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.services.session_events import SessionEvents
from kaisan_console.infrastructure.api.errors import LoginRequired
from kaisan_console.infrastructure.database.repositories.knowledge_repository import KnowledgeRepository
from kaisan_console.infrastructure.database.repositories.profile_repository import ProfileRepository
from kaisan_console.infrastructure.database.repositories.system_prompt_repository import (
    SystemPromptRepository,
)
from kaisan_console.infrastructure.database.supabase_client import (
    SupabaseAuthAdapter,
    get_supabase_client,
)
from kaisan_console.infrastructure.notifications.webhook_notifier import (
    WebhookNotifier,
    knowledge_webhook_mode,
)

ACCESS_COOKIE = "sb-access-token"
REFRESH_COOKIE = "sb-refresh-token"

_bearer_scheme = HTTPBearer(auto_error=False)

# process-wide: one session event stream and one workspace per signed-in user
_SESSION_EVENTS = SessionEvents()
_WORKSPACES = WorkspaceRegistry()


def get_session_events() -> SessionEvents:
    return _SESSION_EVENTS


def get_workspaces() -> WorkspaceRegistry:
    return _WORKSPACES


def get_auth_adapter() -> SupabaseAuthAdapter:
    return SupabaseAuthAdapter(get_session_events())


def get_optional_session(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)],
    auth: Annotated[SupabaseAuthAdapter, Depends(get_auth_adapter)],
) -> SessionEntity | None:
    """Current session from the bearer header or the session cookies."""
    token = None
    if credentials and credentials.scheme and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    if not token:
        token = request.cookies.get(ACCESS_COOKIE)
    return auth.get_session(token, request.cookies.get(REFRESH_COOKIE))


def require_session(
    session: Annotated[SessionEntity | None, Depends(get_optional_session)],
) -> SessionEntity:
    if session is None:
        raise LoginRequired()
    return session


def get_workspace(
    session: Annotated[SessionEntity, Depends(require_session)],
    workspaces: Annotated[WorkspaceRegistry, Depends(get_workspaces)],
) -> UserWorkspace:
    return workspaces.get(session.user_id)


def guard_navigation(
    request: Request,
    workspace: Annotated[UserWorkspace, Depends(get_workspace)],
    confirm: bool = Query(False, description="Leave the current page even with unsaved changes"),
) -> UserWorkspace:
    """Treat a page GET as a navigation and let the unsaved-changes guard veto it."""
    target = request.url.path
    was_dirty = workspace.guard.is_dirty
    workspace.guard.check_navigation(workspace.route, target, confirmed=confirm)
    if was_dirty and not workspace.guard.is_dirty:
        # confirmed leave: queued notifications and the open form are discarded
        workspace.drain_notifications()
        workspace.clear_form()
    workspace.visit(target)
    return workspace


def get_profile_repo() -> ProfileRepository:
    return ProfileRepository(get_supabase_client())


def get_knowledge_repo() -> KnowledgeRepository:
    return KnowledgeRepository(get_supabase_client())


def get_prompt_repo() -> SystemPromptRepository:
    return SystemPromptRepository(get_supabase_client())


def get_notifier() -> WebhookNotifier:
    return WebhookNotifier()


def get_webhook_mode() -> str:
    return knowledge_webhook_mode()
