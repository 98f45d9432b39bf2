"""libtmux adapter: the only code that talks to the tmux server.

Panes and windows are addressed by the integer part of their tmux ids
(``%5`` → 5, ``@3`` → 3). Every public method returns a value or None/False
on failure; libtmux exceptions never escape this module.

// [LAW:locality-or-seam] All tmux calls isolated here; the rest of the package sees integers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import libtmux

logger = logging.getLogger(__name__)

# Accepts Up/Down as well as libtmux's Above/Below.
_DIRECTION_NAMES = {
    "up": "Above",
    "above": "Above",
    "down": "Below",
    "below": "Below",
    "left": "Left",
    "right": "Right",
}


def _parse_id(raw: object, sigil: str) -> int:
    text = str(raw).strip()
    if text.startswith(sigil):
        text = text[1:]
    value = int(text)
    if value < 0:
        raise ValueError("negative id {!r}".format(raw))
    return value


def parse_pane_id(raw: object) -> int:
    """``"%5"`` or ``"5"`` → 5. Raises ValueError on anything else."""
    return _parse_id(raw, "%")


def parse_tab_id(raw: object) -> int:
    """``"@3"`` or ``"3"`` → 3. Raises ValueError on anything else."""
    return _parse_id(raw, "@")


def format_pane_id(pane_id: int) -> str:
    return "%{}".format(pane_id)


def format_tab_id(tab_id: int) -> str:
    return "@{}".format(tab_id)


def resolve_direction(name: str):
    """Map a configured direction name to ``libtmux.constants.PaneDirection``."""
    from libtmux.constants import PaneDirection

    key = _DIRECTION_NAMES.get(str(name or "").strip().lower())
    if key is None:
        raise ValueError("unknown split direction {!r}".format(name))
    return getattr(PaneDirection, key)


class TmuxHost:
    """Result-bearing accessors over a libtmux.Server."""

    def __init__(self, server: "libtmux.Server | None" = None) -> None:
        if server is None:
            import libtmux

            server = libtmux.Server()
        self._server = server

    # ─── lookups ─────────────────────────────────────────────────────────

    # Grouped sessions and linked windows list a shared pane or window once
    # per session, so lookups take the first match instead of get().

    def find_pane(self, pane_id: int) -> "libtmux.Pane | None":
        try:
            matches = self._server.panes.filter(pane_id=format_pane_id(pane_id))
        except Exception as e:
            logger.debug("find_pane %s error: %s", pane_id, e)
            return None
        return matches[0] if matches else None

    def _find_window(self, tab_id: int) -> "libtmux.Window | None":
        try:
            matches = self._server.windows.filter(window_id=format_tab_id(tab_id))
        except Exception as e:
            logger.debug("find_window %s error: %s", tab_id, e)
            return None
        return matches[0] if matches else None

    def window_exists(self, tab_id: int) -> bool:
        return self._find_window(tab_id) is not None

    def tab_of(self, pane_id: int) -> int | None:
        pane = self.find_pane(pane_id)
        if pane is None:
            return None
        try:
            return parse_tab_id(pane.window_id)
        except Exception as e:
            logger.debug("tab_of %s error: %s", pane_id, e)
            return None

    def zoomed_pane(self, tab_id: int) -> int | None:
        """Return the zoomed pane of a window, or None when the window is not zoomed."""
        window = self._find_window(tab_id)
        if window is None:
            return None
        try:
            if str(window.window_zoomed_flag or "0") != "1":
                return None
            return parse_pane_id(window.active_pane.pane_id)
        except Exception as e:
            logger.debug("zoomed_pane %s error: %s", tab_id, e)
            return None

    # ─── mutations ───────────────────────────────────────────────────────

    def activate(self, pane_id: int) -> bool:
        pane = self.find_pane(pane_id)
        if pane is None:
            logger.warning("activate: pane %s not found", pane_id)
            return False
        try:
            pane.select()
            return True
        except Exception as e:
            logger.error("activate %s error: %s", pane_id, e)
            return False

    def set_zoomed(self, tab_id: int, zoomed: bool) -> bool:
        """Zoom or unzoom the active pane of a window. Idempotent."""
        window = self._find_window(tab_id)
        if window is None:
            logger.warning("set_zoomed: tab %s not found", tab_id)
            return False
        try:
            is_zoomed = str(window.window_zoomed_flag or "0") == "1"
            if is_zoomed == bool(zoomed):
                return True
            # resize(zoom=True) toggles the zoom of that pane's window.
            window.active_pane.resize(zoom=True)
            return True
        except Exception as e:
            logger.error("set_zoomed %s error: %s", tab_id, e)
            return False

    def split(self, pane_id: int, direction: str, size: str) -> int | None:
        """Split ``pane_id`` and focus the new pane. Returns the new pane id."""
        pane = self.find_pane(pane_id)
        if pane is None:
            logger.warning("split: pane %s not found", pane_id)
            return None
        try:
            new_pane = pane.split(
                direction=resolve_direction(direction),
                size=size or None,
                attach=True,
            )
            if new_pane is None:
                return None
            return parse_pane_id(new_pane.pane_id)
        except Exception as e:
            logger.error("split %s error: %s", pane_id, e)
            return None

    def command(self, *args: str) -> bool:
        """Run a raw tmux command. True when tmux reported no error."""
        try:
            proc = self._server.cmd(*args)
        except Exception as e:
            logger.error("tmux %s error: %s", args[0] if args else "", e)
            return False
        if proc.stderr:
            logger.error("tmux %s failed: %s", args[0], " ".join(proc.stderr))
            return False
        return True

    def notify(self, title: str, message: str) -> None:
        try:
            self._server.cmd("display-message", "{}: {}".format(title, message))
        except Exception as e:
            logger.debug("notify error: %s", e)
