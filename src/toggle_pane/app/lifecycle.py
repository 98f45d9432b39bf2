"""Pane/tab removal hooks. Prune stale references outside of a toggle.

Invoked from tmux hooks (pane-exited, after-kill-pane, window-unlinked),
usually in a fresh process, so the in-memory cache may start empty.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toggle_pane.app.state_cache import StateCache
    from toggle_pane.app.tmux_host import TmuxHost
    from toggle_pane.app.toggle_state import ToggleState

logger = logging.getLogger(__name__)


class LifecycleHooks:
    def __init__(self, host: "TmuxHost", cache: "StateCache") -> None:
        self._host = host
        self._cache = cache

    def on_pane_removed(self, pane_id: int, tab_id: int | None = None) -> bool:
        """Clear ``pane_id`` from whichever tab references it. Returns True if state changed."""
        if tab_id is None:
            tab_id = self._host.tab_of(pane_id)

        # Records are read as written so the removed pane is still found here.
        if tab_id is not None:
            logger.debug("pane-removed: pane %s from tab %s", pane_id, tab_id)
            if not self._cache.known(tab_id):
                return False
            fresh = tab_id not in self._cache
            state = self._cache.get(tab_id, check_live=False)
            changed = self._prune(tab_id, state, pane_id)
            if fresh or state.is_empty:
                self._cache.forget(tab_id)
            return changed

        # The host can no longer say which tab the pane was in.
        logger.debug("pane-removed: tab of pane %s unknown, scanning known states", pane_id)
        loaded = self._cache.warm(check_live=False)
        changed = False
        for known_tab, state in self._cache.items():
            if self._prune(known_tab, state, pane_id):
                changed = True
        for known_tab in loaded:
            self._cache.forget(known_tab)
        return changed

    def on_tab_removed(self, tab_id: int) -> bool:
        """Drop all state for ``tab_id``. Repeating it is a no-op."""
        logger.debug("tab-removed: tab %s", tab_id)
        if not self._cache.known(tab_id):
            return False
        # window-unlinked also fires when a live window moves to another session.
        if self._host.window_exists(tab_id):
            logger.debug("Tab %s still exists. Keeping its toggle pane state.", tab_id)
            return False
        logger.info("Tab %s removed. Deleting its toggle pane state.", tab_id)
        self._cache.reset(tab_id)
        self._cache.forget(tab_id)
        return True

    def _prune(self, tab_id: int, state: "ToggleState", pane_id: int) -> bool:
        if state.pane_id == pane_id:
            logger.info("Toggle pane %s for tab %s removed. Clearing it.", pane_id, tab_id)
            state.pane_id = None
            state.zoomed = False
            if state.invoker_id == pane_id:
                state.invoker_id = None
        elif state.invoker_id == pane_id:
            logger.info("Invoker pane %s for tab %s removed. Clearing invoker.", pane_id, tab_id)
            state.invoker_id = None
        else:
            return False

        self._cache.save(tab_id)
        if state.is_empty:
            logger.debug("Tab %s state fully reset by pane removal. Removing from memory.", tab_id)
            self._cache.forget(tab_id)
        return True
