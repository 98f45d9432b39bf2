"""Toggle decision engine: create, show, or hide the per-tab toggle pane.

One call = one complete state transition. The decision is returned as a
ToggleResult so callers (CLI, tests) can see what happened without
inspecting tmux.

// [LAW:single-enforcer] toggle() is the sole place that decides create/show/hide.
// [LAW:single-enforcer] _activate_with_zoom() is the sole activate+zoom sequence.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from toggle_pane.app.options import ToggleOptions

if TYPE_CHECKING:
    from toggle_pane.app.state_cache import StateCache
    from toggle_pane.app.tmux_host import TmuxHost
    from toggle_pane.app.toggle_state import ToggleState
    from toggle_pane.app.validator import PaneValidator

logger = logging.getLogger(__name__)

# First pass plus one retry after an inconsistent-state reset.
_MAX_ATTEMPTS = 2


class ToggleAction(Enum):
    """What toggle() decided to do."""

    CREATED = "created"
    SHOWN = "shown"
    HIDDEN = "hidden"
    RESET = "reset"
    FAILED = "failed"


class ToggleResult:
    """Result of toggle(): what happened and to which pane.

    // [LAW:dataflow-not-control-flow] The decision is a value, not hidden in branches.
    """

    __slots__ = ("action", "detail", "pane_id")

    def __init__(self, action: ToggleAction, detail: str, pane_id: int | None = None):
        self.action = action
        self.detail = detail
        self.pane_id = pane_id  # pane focused afterwards, if any

    @property
    def success(self) -> bool:
        return self.action in (ToggleAction.CREATED, ToggleAction.SHOWN, ToggleAction.HIDDEN)

    def __repr__(self) -> str:
        parts = "action={}, detail={!r}".format(self.action.value, self.detail)
        if self.pane_id is not None:
            parts += ", pane_id={}".format(self.pane_id)
        return "ToggleResult({})".format(parts)


class ToggleEngine:
    def __init__(
        self,
        host: "TmuxHost",
        cache: "StateCache",
        validator: "PaneValidator",
        options: ToggleOptions | None = None,
    ) -> None:
        self._host = host
        self._cache = cache
        self._validator = validator
        self.options = options or ToggleOptions()

    def toggle(self, current_pane_id: int, current_tab_id: int) -> ToggleResult:
        logger.debug("Toggle: current_pane=%s, current_tab=%s", current_pane_id, current_tab_id)
        for attempt in range(_MAX_ATTEMPTS):
            result = self._toggle_once(current_pane_id, current_tab_id)
            if result is not None:
                return result
            logger.debug("Toggle for tab %s reset, attempt %d done.", current_tab_id, attempt + 1)
        logger.error(
            "Toggle for tab %s still inconsistent after reset. Aborting.", current_tab_id
        )
        return ToggleResult(ToggleAction.FAILED, "inconsistent state after reset")

    # ─── one pass ────────────────────────────────────────────────────────

    def _toggle_once(self, pane_id: int, tab_id: int) -> ToggleResult | None:
        """Run the algorithm once. None means "state was reset, run again"."""
        state = self._cache.get(tab_id)
        self._update_invoker(state, pane_id, tab_id)

        if self._validator.is_live(state.pane_id, tab_id):
            if pane_id == state.pane_id:
                return self._hide(state, tab_id)
            return self._show(state, pane_id, tab_id)
        return self._create(state, pane_id, tab_id)

    def _update_invoker(self, state: "ToggleState", pane_id: int, tab_id: int) -> None:
        if pane_id != state.pane_id:
            if state.invoker_id is None or self.options.change_invoker_id_everytime:
                if state.invoker_id != pane_id:
                    logger.debug("Updating invoker for tab %s to %s.", tab_id, pane_id)
                    state.invoker_id = pane_id
        if state.invoker_id is None:
            if pane_id != state.pane_id:
                logger.debug("Setting invoker for tab %s to %s (was unset).", tab_id, pane_id)
                state.invoker_id = pane_id
            else:
                # Left as-is: the hide path resets the tab when it finds no invoker.
                logger.warning(
                    "Invoker for tab %s is unset, but current pane %s is the toggle pane. "
                    "Expecting reset.",
                    tab_id, pane_id,
                )

    def _hide(self, state: "ToggleState", tab_id: int) -> ToggleResult | None:
        toggle_pane = state.pane_id
        invoker = state.invoker_id
        logger.debug("Currently in toggle pane %s. Switching to invoker %s.", toggle_pane, invoker)
        if not self._validator.is_live(invoker, tab_id):
            logger.warning(
                "Invoker pane %s for tab %s invalid/not found. Resetting state and retrying.",
                invoker, tab_id,
            )
            self._cache.reset(tab_id)
            return None

        zoom = self.options.zoom
        if zoom.remember_zoomed:
            state.zoomed = self._host.zoomed_pane(tab_id) == toggle_pane
            logger.debug("Toggle pane %s zoom state remembered: %s", toggle_pane, state.zoomed)

        if not self._activate_with_zoom(invoker, tab_id, zoom.auto_zoom_invoker_pane):
            return self._reset_after_failure(tab_id, "could not activate invoker {}".format(invoker))
        self._cache.save(tab_id)
        return ToggleResult(ToggleAction.HIDDEN, "returned to invoker", pane_id=invoker)

    def _show(self, state: "ToggleState", pane_id: int, tab_id: int) -> ToggleResult:
        toggle_pane = state.pane_id
        logger.debug("Currently in pane %s. Activating toggle pane %s.", pane_id, toggle_pane)
        zoom = self.options.zoom
        should_zoom = (state.zoomed and zoom.remember_zoomed) or zoom.auto_zoom_toggle_terminal
        if not self._activate_with_zoom(toggle_pane, tab_id, should_zoom):
            return self._reset_after_failure(
                tab_id, "could not activate toggle pane {}".format(toggle_pane)
            )
        self._cache.save(tab_id)
        detail = "zoomed" if should_zoom else "split"
        return ToggleResult(ToggleAction.SHOWN, detail, pane_id=toggle_pane)

    def _create(self, state: "ToggleState", pane_id: int, tab_id: int) -> ToggleResult:
        logger.info("Toggle pane for tab %s not found or invalid. Creating new one.", tab_id)
        if state.pane_id is not None:
            logger.debug("Previous toggle pane %s was invalid. Clearing.", state.pane_id)
            state.pane_id = None
            state.zoomed = False

        if state.invoker_id is None:
            state.invoker_id = pane_id

        new_pane = self._host.split(pane_id, self.options.direction, self.options.size)
        if new_pane is None:
            logger.error("Failed to create new toggle pane in tab %s by splitting %s.", tab_id, pane_id)
            self._cache.reset(tab_id)
            return ToggleResult(ToggleAction.FAILED, "split of pane {} failed".format(pane_id))

        state.pane_id = new_pane
        logger.info(
            "Created new toggle pane %s for tab %s. Invoker: %s.",
            new_pane, tab_id, state.invoker_id,
        )
        state.zoomed = False
        if self.options.zoom.auto_zoom_toggle_terminal:
            state.zoomed = self._host.set_zoomed(tab_id, True)
        self._cache.save(tab_id)
        return ToggleResult(ToggleAction.CREATED, "split pane {}".format(pane_id), pane_id=new_pane)

    # ─── helpers ─────────────────────────────────────────────────────────

    def _activate_with_zoom(self, pane_id: int, tab_id: int, zoom: bool) -> bool:
        """Unzoom whatever is zoomed, activate ``pane_id``, then zoom it if asked."""
        if self._host.zoomed_pane(tab_id) is not None and not self._host.set_zoomed(tab_id, False):
            return False
        if not self._host.activate(pane_id):
            return False
        if zoom and not self._host.set_zoomed(tab_id, True):
            return False
        return True

    def _reset_after_failure(self, tab_id: int, detail: str) -> ToggleResult:
        logger.error("Toggle for tab %s failed: %s. Resetting state.", tab_id, detail)
        self._cache.reset(tab_id)
        return ToggleResult(ToggleAction.RESET, detail)
