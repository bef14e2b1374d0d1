"""Unsaved-changes guard for the knowledge base editor.

The guard is created once per workspace and its checks read the current state
when a navigation or unload happens, so a state change never requires the
guard to be detached and attached again.
"""
from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class DirtyState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class NavigationAborted(Exception):
    """Navigation was declined while unsaved changes exist."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Navigation from {current} to {target} aborted")
        self.current = current
        self.target = target


class DirtyStateGuard:
    def __init__(self) -> None:
        self._state = DirtyState.CLEAN

    @property
    def state(self) -> DirtyState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is DirtyState.DIRTY

    def mark_dirty(self) -> None:
        self._state = DirtyState.DIRTY

    def mark_clean(self) -> None:
        self._state = DirtyState.CLEAN

    def confirm_unload(self) -> bool:
        """Whether leaving the page must be confirmed by the user."""
        return self.is_dirty

    def check_navigation(self, current: str, target: str, confirmed: bool = False) -> None:
        """Let a navigation through or raise :class:`NavigationAborted`.

        Staying on the current route is never intercepted. A confirmed
        navigation discards the unsaved state.
        """
        if target == current or not self.is_dirty:
            return
        if not confirmed:
            logger.info("Navigation %s -> %s held back by unsaved changes", current, target)
            raise NavigationAborted(current, target)
        self.mark_clean()
