"""Pane liveness checks against the tmux server.

// [LAW:single-enforcer] is_live() is the sole "does this pane still belong here" check.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toggle_pane.app.tmux_host import TmuxHost

logger = logging.getLogger(__name__)


class PaneValidator:
    """Converts host lookups into a plain boolean. Never raises."""

    def __init__(self, host: "TmuxHost") -> None:
        self._host = host

    def is_live(self, pane_id: int | None, tab_id: int) -> bool:
        if pane_id is None:
            return False
        try:
            owner = self._host.tab_of(pane_id)
        except Exception as e:
            logger.debug("lookup of pane %s failed: %s", pane_id, e)
            return False
        if owner is None:
            return False
        if owner != tab_id:
            logger.warning(
                "Pane %s belongs to tab %s (expected %s). Considered invalid.",
                pane_id, owner, tab_id,
            )
            return False
        return True
