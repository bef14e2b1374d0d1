from __future__ import annotations

import logging
import threading
from typing import Callable

from kaisan_console.domain.entities.session import AuthEvent, SessionEntity

logger = logging.getLogger(__name__)

SessionListener = Callable[[AuthEvent, SessionEntity | None], None]


class Subscription:
    """Handle returned by :meth:`SessionEvents.subscribe`."""

    def __init__(self, hub: SessionEvents, listener: SessionListener) -> None:
        self._hub = hub
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._hub._remove(self._listener)


class SessionEvents:
    """Process-wide stream of session changes.

    The auth adapter is the only publisher. Listeners receive the event and the
    session it concerns (the one that ended, for a sign-out) and must treat it
    as read-only.
    """

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: SessionListener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: SessionListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish(self, event: AuthEvent, session: SessionEntity | None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener failed on %s", event.value)
