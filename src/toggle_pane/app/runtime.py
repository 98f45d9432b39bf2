"""Process-wide wiring: options, logging, store, cache, engine, hooks.

setup() is idempotent. If the state directory cannot be made available the
feature is disabled for the rest of the process: the first toggle shows a
tmux message, every toggle logs an error, and removal hooks do nothing.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict

import toggle_pane.io.logging_setup
import toggle_pane.io.settings
from toggle_pane.app.lifecycle import LifecycleHooks
from toggle_pane.app.options import ToggleOptions, load_options, merge_options
from toggle_pane.app.state_cache import StateCache
from toggle_pane.app.tmux_host import TmuxHost, parse_pane_id
from toggle_pane.app.toggle_engine import ToggleAction, ToggleEngine, ToggleResult
from toggle_pane.app.validator import PaneValidator
from toggle_pane.io.state_store import StateStore

logger = logging.getLogger(__name__)

NOTIFY_TITLE = "TogglePane Error"


class TogglePane:
    """Facade used by the CLI. One instance per process."""

    def __init__(self, host: TmuxHost | None = None, state_dir=None) -> None:
        self._host = host
        self._state_dir = state_dir
        self._setup_done = False
        self._notified = False
        self.options = ToggleOptions()
        self.store: StateStore | None = None
        self.cache: StateCache | None = None
        self.engine: ToggleEngine | None = None
        self.hooks: LifecycleHooks | None = None

    @property
    def enabled(self) -> bool:
        return self._setup_done and self.store is not None and self.store.available

    @property
    def host(self) -> TmuxHost:
        if self._host is None:
            self._host = TmuxHost()
        return self._host

    def setup(self, overrides: dict | None = None, configure_logging: bool = True) -> bool:
        """Load options and prepare storage. Returns whether the feature is enabled."""
        if self._setup_done:
            if overrides:
                # Later setup calls only refine options.
                self.options = load_options(merge_options(asdict(self.options), overrides))
                self.engine.options = self.options
            return self.enabled

        self.options = load_options(overrides)
        if configure_logging:
            toggle_pane.io.logging_setup.configure(debug=self.options.debug_logging)
        logger.info("TogglePane setup. Debug logging: %s", self.options.debug_logging)

        state_dir = self._state_dir or toggle_pane.io.settings.get_state_dir()
        validator = PaneValidator(self.host)
        self.store = StateStore(state_dir, validator)
        self.cache = StateCache(self.store)
        self.engine = ToggleEngine(self.host, self.cache, validator, self.options)
        self.hooks = LifecycleHooks(self.host, self.cache)

        if not self.store.ensure_directory():
            logger.error("TogglePane disabled: state directory %s problem.", state_dir)
        self._setup_done = True
        return self.enabled

    def toggle(self, pane_id: int | None = None) -> ToggleResult:
        """Toggle from ``pane_id`` (default: $TMUX_PANE)."""
        if not self.enabled:
            logger.error("TogglePane not initialized (state directory error). Aborting toggle.")
            if self._setup_done and not self._notified:
                self._notified = True
                self.host.notify(NOTIFY_TITLE, "Module not initialized. Check logs.")
            return ToggleResult(ToggleAction.FAILED, "not initialized")

        if pane_id is None:
            raw = os.environ.get("TMUX_PANE", "")
            try:
                pane_id = parse_pane_id(raw)
            except ValueError:
                logger.error("No acting pane given and $TMUX_PANE is %r.", raw)
                return ToggleResult(ToggleAction.FAILED, "acting pane unknown")

        tab_id = self.host.tab_of(pane_id)
        if tab_id is None:
            logger.error("Acting pane %s not found.", pane_id)
            return ToggleResult(ToggleAction.FAILED, "pane {} not found".format(pane_id))
        return self.engine.toggle(pane_id, tab_id)

    def on_pane_removed(self, pane_id: int, tab_id: int | None = None) -> bool:
        if not self.enabled:
            return False
        return self.hooks.on_pane_removed(pane_id, tab_id)

    def on_tab_removed(self, tab_id: int) -> bool:
        if not self.enabled:
            return False
        return self.hooks.on_tab_removed(tab_id)

    def clear(self, tab_id: int) -> bool:
        """Force-reset one tab's state. Returns False when disabled."""
        if not self.enabled:
            return False
        self.cache.reset(tab_id)
        self.cache.forget(tab_id)
        return True

    def snapshot(self) -> list:
        """(tab_id, ToggleState) for every tab with live or persisted state."""
        if not self.enabled:
            return []
        self.cache.warm()
        return sorted(
            ((tab_id, state) for tab_id, state in self.cache.items() if not state.is_empty),
            key=lambda item: item[0],
        )
