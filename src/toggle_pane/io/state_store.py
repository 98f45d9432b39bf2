"""Per-tab toggle state files.

One JSON record per tab at <state_dir>/tab_<id>.json. Every failure path
deletes the offending file and reports "absent"; a known-bad record is
never retried.

This module is a STABLE BOUNDARY: filesystem only, host access goes
through the injected validator.

// [LAW:single-enforcer] StateStore is the only reader/writer of state files.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING

from toggle_pane.app.toggle_state import RecordError, ToggleState

if TYPE_CHECKING:
    from toggle_pane.app.validator import PaneValidator

logger = logging.getLogger(__name__)

_ACCESS_CHECK = ".access_check"
_FILE_RE = re.compile(r"^tab_(\d+)\.json$")


class StateStore:
    """Load/save ToggleState records, validating pane ids on both paths."""

    def __init__(self, state_dir: Path | str, validator: "PaneValidator") -> None:
        self.state_dir = Path(state_dir)
        self._validator = validator
        self._dir_ok = False

    @property
    def available(self) -> bool:
        return self._dir_ok

    def ensure_directory(self) -> bool:
        """Idempotent check-then-create. Result is cached for the process lifetime."""
        if self._dir_ok:
            return True

        marker = self.state_dir / _ACCESS_CHECK
        if marker.is_file():
            logger.debug("State directory %s already exists and is accessible.", self.state_dir)
            self._dir_ok = True
            return True

        logger.info("State directory %s missing or unverified, creating.", self.state_dir)
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            marker.write_text("", encoding="utf-8")
        except OSError as e:
            logger.error("Failed to create state directory %s: %s", self.state_dir, e)
            return False

        logger.info("State directory %s ready.", self.state_dir)
        self._dir_ok = True
        return True

    def path_for(self, tab_id: int) -> Path:
        return self.state_dir / "tab_{}.json".format(tab_id)

    def exists(self, tab_id: int) -> bool:
        return self._dir_ok and self.path_for(tab_id).is_file()

    def tab_ids(self) -> list[int]:
        """Tab ids that currently have a record on disk."""
        if not self._dir_ok:
            return []
        try:
            names = os.listdir(self.state_dir)
        except OSError as e:
            logger.warning("Could not list state directory %s: %s", self.state_dir, e)
            return []
        ids = []
        for name in names:
            match = _FILE_RE.match(name)
            if match:
                ids.append(int(match.group(1)))
        return sorted(ids)

    def delete(self, tab_id: int) -> None:
        path = self.path_for(tab_id)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Problem deleting state file %s: %s", path, e)

    def read(self, tab_id: int) -> ToggleState | None:
        """Decode the record for ``tab_id`` without checking that its panes are live.

        Unreadable or malformed files are still deleted.
        """
        if not self._dir_ok:
            return None

        path = self.path_for(tab_id)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("State file not found for tab %s.", tab_id)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read state file %s: %s. Deleting.", path, e)
            self.delete(tab_id)
            return None

        if not content.strip():
            logger.warning("State file for tab %s is empty, deleting: %s", tab_id, path)
            self.delete(tab_id)
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(
                "Failed to parse JSON from state file %s for tab %s: %s. Deleting corrupt file.",
                path, tab_id, e,
            )
            self.delete(tab_id)
            return None

        try:
            return ToggleState.from_record(data, tab_id)
        except RecordError as e:
            logger.warning("State file %s for tab %s discarded: %s", path, tab_id, e)
            self.delete(tab_id)
            return None

    def load(self, tab_id: int) -> ToggleState | None:
        state = self.read(tab_id)
        if state is None:
            return None

        # The toggle pane anchors the record; losing it invalidates everything.
        if state.pane_id is not None and not self._validator.is_live(state.pane_id, tab_id):
            logger.info(
                "Toggle pane %s from state file for tab %s no longer valid. Discarding state.",
                state.pane_id, tab_id,
            )
            self.delete(tab_id)
            return None

        if state.invoker_id is not None and not self._validator.is_live(state.invoker_id, tab_id):
            logger.info(
                "Invoker pane %s from state file for tab %s no longer valid. Clearing it.",
                state.invoker_id, tab_id,
            )
            state.invoker_id = None
            self.save(tab_id, state)

        logger.debug(
            "Loaded state for tab %s: pane_id=%s, invoker_id=%s, zoomed=%s",
            tab_id, state.pane_id, state.invoker_id, state.zoomed,
        )
        return state

    def save(self, tab_id: int, state: ToggleState) -> None:
        """Persist ``state``, or delete the record if it has no live toggle pane."""
        if not self._dir_ok:
            logger.error("Cannot save state for tab %s, state directory unavailable.", tab_id)
            return

        if not self._validator.is_live(state.pane_id, tab_id):
            logger.debug("Toggle pane for tab %s is invalid or unset. Deleting state file.", tab_id)
            self.delete(tab_id)
            return

        try:
            payload = json.dumps(state.to_record(tab_id, int(time.time())))
        except (TypeError, ValueError) as e:
            logger.error("Failed to encode state for tab %s: %s. Deleting state file.", tab_id, e)
            self.delete(tab_id)
            return

        logger.debug(
            "Saving state for tab %s: pane_id=%s, invoker_id=%s, zoomed=%s",
            tab_id, state.pane_id, state.invoker_id, state.zoomed,
        )
        path = self.path_for(tab_id)
        # Atomic: write temp → rename
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.state_dir, prefix=".tab_", suffix=".tmp")
        except OSError as e:
            logger.error("Failed to open temp file for tab %s: %s", tab_id, e)
            return
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write state file %s: %s", path, e)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
