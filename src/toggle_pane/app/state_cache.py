"""In-memory per-tab toggle state, lazily populated from the state store.

// [LAW:one-source-of-truth] Once loaded, the cached ToggleState is authoritative.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from toggle_pane.app.toggle_state import ToggleState

if TYPE_CHECKING:
    from toggle_pane.io.state_store import StateStore

logger = logging.getLogger(__name__)


class StateCache:
    """Maps tab id → ToggleState. Populate on miss, evict on full reset."""

    def __init__(self, store: "StateStore") -> None:
        self._store = store
        self._states: dict[int, ToggleState] = {}

    def __contains__(self, tab_id: int) -> bool:
        return tab_id in self._states

    def get(self, tab_id: int, check_live: bool = True) -> ToggleState:
        """Cached state for ``tab_id``, loading it on a miss.

        ``check_live=False`` takes a persisted record as written, without
        dropping panes the host no longer knows.
        """
        state = self._states.get(tab_id)
        if state is not None:
            return state
        logger.debug("In-memory state for tab %s not found. Attempting to load.", tab_id)
        state = self._store.load(tab_id) if check_live else self._store.read(tab_id)
        if state is None:
            logger.debug("No valid persisted state for tab %s. Initializing new state.", tab_id)
            state = ToggleState()
        self._states[tab_id] = state
        return state

    def known(self, tab_id: int) -> bool:
        """True if the tab is cached or has a record on disk."""
        return tab_id in self._states or self._store.exists(tab_id)

    def items(self) -> list[tuple[int, ToggleState]]:
        return list(self._states.items())

    def warm(self, check_live: bool = True) -> list[int]:
        """Load every tab that has a record on disk but is not cached yet. Returns those tab ids."""
        loaded = []
        for tab_id in self._store.tab_ids():
            if tab_id not in self._states:
                self.get(tab_id, check_live)
                loaded.append(tab_id)
        return loaded

    def save(self, tab_id: int) -> None:
        """Persist the cached state for ``tab_id`` (deletes the file if it has no live pane)."""
        state = self._states.get(tab_id)
        if state is not None:
            self._store.save(tab_id, state)

    def reset(self, tab_id: int) -> ToggleState:
        logger.debug("Completely resetting state for tab %s.", tab_id)
        state = ToggleState()
        self._states[tab_id] = state
        self._store.save(tab_id, state)
        return state

    def forget(self, tab_id: int) -> None:
        self._states.pop(tab_id, None)
