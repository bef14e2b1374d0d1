from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity
from kaisan_console.domain.entities.session import AuthEvent, SessionEntity
from kaisan_console.domain.services.dirty_state import DirtyStateGuard

logger = logging.getLogger(__name__)


@dataclass
class UserWorkspace:
    """Per-user console state that outlives a single request.

    Holds the route the user last rendered, the knowledge base form and the
    unsaved-changes guard. Once closed (sign-out) every update is ignored so
    results arriving late cannot resurrect the state.
    """

    user_id: str
    route: str = "/"
    editing_id: str | None = None
    question: str = ""
    answer: str = ""
    guard: DirtyStateGuard = field(default_factory=DirtyStateGuard)
    pending: list[dict[str, Any]] = field(default_factory=list)
    is_open: bool = True

    def visit(self, route: str) -> None:
        if self.is_open:
            self.route = route

    def enter_edit(self, entry: KnowledgeEntryEntity) -> bool:
        if not self.is_open:
            return False
        self.editing_id = entry.id
        self.question = entry.question
        self.answer = entry.answer
        return True

    def clear_form(self) -> bool:
        if not self.is_open:
            return False
        self.editing_id = None
        self.question = ""
        self.answer = ""
        return True

    def queue_notification(self, payload: dict[str, Any]) -> bool:
        if not self.is_open:
            return False
        self.pending.append(payload)
        return True

    def drain_notifications(self) -> list[dict[str, Any]]:
        out, self.pending = self.pending, []
        return out

    def close(self) -> None:
        self.is_open = False
        self.pending = []
        self.guard.mark_clean()


class WorkspaceRegistry:
    def __init__(self) -> None:
        self._items: dict[str, UserWorkspace] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> UserWorkspace:
        with self._lock:
            ws = self._items.get(user_id)
            if ws is None:
                ws = UserWorkspace(user_id=user_id)
                self._items[user_id] = ws
            return ws

    def peek(self, user_id: str) -> UserWorkspace | None:
        with self._lock:
            return self._items.get(user_id)

    def drop(self, user_id: str) -> None:
        with self._lock:
            ws = self._items.pop(user_id, None)
        if ws is not None:
            ws.close()
            logger.debug("Closed workspace for user %s", user_id)

    def clear(self) -> None:
        with self._lock:
            items, self._items = self._items, {}
        for ws in items.values():
            ws.close()

    def on_session_event(self, event: AuthEvent, session: SessionEntity | None) -> None:
        if event is AuthEvent.SIGNED_OUT and session is not None:
            self.drop(session.user_id)
