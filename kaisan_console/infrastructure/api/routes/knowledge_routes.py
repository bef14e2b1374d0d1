from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from kaisan_console.application import messages
from kaisan_console.application.dtos.common_dto import MessageDTO, page_context
from kaisan_console.application.dtos.knowledge_dto import (
    KnowledgeBaseView,
    KnowledgeEntryBody,
    KnowledgeEntryItem,
    KnowledgeForm,
)
from kaisan_console.application.services.workspace_registry import UserWorkspace
from kaisan_console.application.use_cases.manage_knowledge_base import (
    DeleteKnowledgeEntryUseCase,
    EditKnowledgeEntryUseCase,
    PublishKnowledgeBaseUseCase,
)
from kaisan_console.application.use_cases.submit_knowledge_entry import SubmitKnowledgeEntryUseCase
from kaisan_console.domain.entities.session import SessionEntity
from kaisan_console.domain.errors import StoreError
from kaisan_console.infrastructure.api.dependencies import (
    get_knowledge_repo,
    get_notifier,
    get_webhook_mode,
    get_workspace,
    guard_navigation,
    require_session,
)
from kaisan_console.infrastructure.database.repositories.knowledge_repository import KnowledgeRepository
from kaisan_console.infrastructure.notifications.webhook_notifier import (
    WebhookNotifier,
    knowledge_webhook_url,
)

logger = logging.getLogger(__name__)

ROUTE = "/base-de-conhecimento"

router = APIRouter(
    prefix=ROUTE,
    tags=["Knowledge Base"],
    responses={
        303: {"description": "See Other - No session, redirected to the login screen"},
        400: {"description": "Bad Request - Question or answer missing"},
        404: {"description": "Not Found - Entry does not exist"},
        409: {"description": "Conflict - Navigation held back by unsaved changes"},
        502: {"description": "Bad Gateway - The record store rejected the operation"},
    },
)


def get_page_workspace(workspace: UserWorkspace = Depends(get_workspace)) -> UserWorkspace:
    """Workspace of a knowledge base action; the page stays the rendered route."""
    workspace.visit(ROUTE)
    return workspace


def _render(
    session: SessionEntity,
    workspace: UserWorkspace,
    repo: KnowledgeRepository,
    mode: str,
    message: MessageDTO | None = None,
) -> KnowledgeBaseView:
    """Build the page from a fresh read of the store."""
    try:
        entries = [KnowledgeEntryItem.from_entity(e) for e in repo.list_all()]
    except StoreError as exc:
        logger.error("Failed to fetch knowledge base: %s", exc)
        entries = []
        message = MessageDTO.error(messages.FETCH_FAILED.format(error=exc))
    return KnowledgeBaseView(
        **page_context(ROUTE, session.email),
        message=message,
        entries=entries,
        form=KnowledgeForm(
            question=workspace.question, answer=workspace.answer, editing_id=workspace.editing_id
        ),
        dirty=workspace.guard.is_dirty,
        pending_notifications=len(workspace.pending),
        webhook_mode=mode,
    )


@router.get(
    "",
    response_model=KnowledgeBaseView,
    summary="Knowledge Base Page",
    description="""
    List every knowledge entry (newest first) together with the entry form.

    **Navigation guard**: while the page holds unsaved changes, opening another
    console page answers 409 unless `?confirm=true` is passed.
    """,
)
def knowledge_page(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(guard_navigation),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    mode: str = Depends(get_webhook_mode),
):
    """Render the knowledge base page."""
    return _render(session, workspace, repo, mode)


@router.post(
    "",
    response_model=KnowledgeBaseView,
    summary="Save Knowledge Entry",
    description="""
    Create an entry, or update the one in edit mode.

    In `immediate` webhook mode the knowledge webhook is notified after the
    response; in `deferred` mode the change waits for `POST /publish`.
    """,
)
def submit_entry(
    body: KnowledgeEntryBody,
    background: BackgroundTasks,
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(get_page_workspace),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    notifier: WebhookNotifier = Depends(get_notifier),
    mode: str = Depends(get_webhook_mode),
):
    """Create or update a knowledge entry."""
    uc = SubmitKnowledgeEntryUseCase(repo=repo, workspace=workspace, mode=mode)
    result = uc.execute(session.user_id, body.question, body.answer, entry_id=body.id)
    if result.notification is not None:
        background.add_task(notifier.notify, knowledge_webhook_url(), result.notification)
    return _render(session, workspace, repo, mode, MessageDTO.success(result.message))


@router.post(
    "/{entry_id}/edit",
    response_model=KnowledgeBaseView,
    summary="Edit Knowledge Entry",
    description="Load an entry into the form. In `deferred` mode this marks the page dirty.",
)
def edit_entry(
    entry_id: str,
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(get_page_workspace),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    mode: str = Depends(get_webhook_mode),
):
    """Enter edit mode for an entry."""
    EditKnowledgeEntryUseCase(repo=repo, workspace=workspace, mode=mode).start(entry_id)
    return _render(session, workspace, repo, mode)


@router.post(
    "/cancel",
    response_model=KnowledgeBaseView,
    summary="Cancel Editing",
    description="Leave edit mode and discard unsaved changes.",
)
def cancel_edit(
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(get_page_workspace),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    mode: str = Depends(get_webhook_mode),
):
    """Discard the form."""
    EditKnowledgeEntryUseCase(repo=repo, workspace=workspace, mode=mode).cancel()
    return _render(session, workspace, repo, mode)


@router.post(
    "/publish",
    response_model=KnowledgeBaseView,
    summary="Save Knowledge Base",
    description="""
    Confirm the pending changes: queued notifications are sent to the
    knowledge webhook after the response and the page becomes clean.
    """,
)
def publish(
    background: BackgroundTasks,
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(get_page_workspace),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    notifier: WebhookNotifier = Depends(get_notifier),
    mode: str = Depends(get_webhook_mode),
):
    """Send pending notifications and clear the unsaved state."""
    payloads = PublishKnowledgeBaseUseCase(workspace=workspace).execute()
    if payloads:
        background.add_task(notifier.notify_all, knowledge_webhook_url(), payloads)
    return _render(session, workspace, repo, mode, MessageDTO.success(messages.KNOWLEDGE_PUBLISHED))


@router.delete(
    "/{entry_id}",
    response_model=KnowledgeBaseView,
    summary="Delete Knowledge Entry",
    description="Permanently delete an entry. A missing id returns the store's error.",
)
def delete_entry(
    entry_id: str,
    session: SessionEntity = Depends(require_session),
    workspace: UserWorkspace = Depends(get_page_workspace),
    repo: KnowledgeRepository = Depends(get_knowledge_repo),
    mode: str = Depends(get_webhook_mode),
):
    """Delete a knowledge entry."""
    DeleteKnowledgeEntryUseCase(repo=repo, workspace=workspace, mode=mode).execute(entry_id)
    return _render(session, workspace, repo, mode, MessageDTO.success(messages.ENTRY_DELETED))
