"""Settings file I/O for tmux-toggle-pane.

Reads a JSON settings file at XDG_CONFIG_HOME/tmux-toggle-pane/settings.json.
Option defaults and merge rules live in toggle_pane.app.options.

This module is a STABLE BOUNDARY.
Import as: import toggle_pane.io.settings
"""

import json
import os
from pathlib import Path


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / tmux-toggle-pane / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "tmux-toggle-pane" / "settings.json"


def get_state_dir() -> Path:
    """Return the directory holding per-tab state records.

    $TOGGLE_PANE_STATE_DIR wins; otherwise XDG_STATE_HOME (default ~/.local/state).
    """
    override = os.environ.get("TOGGLE_PANE_STATE_DIR")
    if override:
        return Path(override)
    state_home = os.environ.get("XDG_STATE_HOME", os.path.expanduser("~/.local/state"))
    return Path(state_home) / "tmux-toggle-pane" / "toggle_pane_state"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}
