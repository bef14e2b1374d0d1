from datetime import UTC, datetime

from kaisan_console.application.services.workspace_registry import WorkspaceRegistry
from kaisan_console.domain.entities.knowledge_entry import KnowledgeEntryEntity
from kaisan_console.domain.entities.session import AuthEvent, SessionEntity
from kaisan_console.domain.services.session_events import SessionEvents


def _session(user_id="u1"):
    return SessionEntity(user_id=user_id, email="a@b.c", access_token="tok", refresh_token="ref")


def test_listeners_receive_events_in_order():
    hub = SessionEvents()
    seen = []
    hub.subscribe(lambda event, session: seen.append((event, session.user_id)))
    hub.publish(AuthEvent.SIGNED_IN, _session())
    hub.publish(AuthEvent.SIGNED_OUT, _session())
    assert seen == [(AuthEvent.SIGNED_IN, "u1"), (AuthEvent.SIGNED_OUT, "u1")]


def test_unsubscribe_is_idempotent_and_stops_delivery():
    hub = SessionEvents()
    seen = []
    sub = hub.subscribe(lambda event, session: seen.append(event))
    assert hub.listener_count == 1
    sub.unsubscribe()
    sub.unsubscribe()
    assert not sub.active
    assert hub.listener_count == 0
    hub.publish(AuthEvent.SIGNED_IN, _session())
    assert seen == []


def test_failing_listener_does_not_block_others():
    hub = SessionEvents()
    seen = []

    def broken(event, session):
        raise RuntimeError("boom")

    hub.subscribe(broken)
    hub.subscribe(lambda event, session: seen.append(event))
    hub.publish(AuthEvent.TOKEN_REFRESHED, _session())
    assert seen == [AuthEvent.TOKEN_REFRESHED]


def test_sign_out_closes_workspace():
    hub = SessionEvents()
    registry = WorkspaceRegistry()
    hub.subscribe(registry.on_session_event)
    ws = registry.get("u1")
    ws.guard.mark_dirty()
    ws.queue_notification({"action": "create"})

    hub.publish(AuthEvent.TOKEN_REFRESHED, _session())
    assert registry.peek("u1") is ws

    hub.publish(AuthEvent.SIGNED_OUT, _session())
    assert registry.peek("u1") is None
    assert not ws.is_open
    assert not ws.guard.is_dirty
    assert ws.pending == []


def test_closed_workspace_ignores_late_updates():
    ws = WorkspaceRegistry().get("u1")
    ws.close()
    entry = KnowledgeEntryEntity(id="e1", question="q", answer="a", created_at=datetime.now(UTC))
    assert ws.enter_edit(entry) is False
    assert ws.queue_notification({"action": "create"}) is False
    ws.visit("/prompt")
    assert ws.editing_id is None
    assert ws.pending == []
    assert ws.route == "/"
