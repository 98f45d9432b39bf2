"""Toggle pane options: defaults, recursive merge, typed view.

// [LAW:one-source-of-truth] All known options and their defaults live in DEFAULTS.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

import toggle_pane.io.settings

DEFAULTS: dict[str, object] = {
    "key": ";",
    "mods": "CTRL",
    "direction": "Up",
    "size": "20%",
    "change_invoker_id_everytime": False,
    "zoom": {
        "auto_zoom_toggle_terminal": False,
        "auto_zoom_invoker_pane": True,
        "remember_zoomed": True,
    },
    "debug_logging": False,
}

_MOD_PREFIXES = {
    "CTRL": "C-",
    "CONTROL": "C-",
    "ALT": "M-",
    "META": "M-",
    "SHIFT": "S-",
}


@dataclass
class ZoomOptions:
    auto_zoom_toggle_terminal: bool = False
    auto_zoom_invoker_pane: bool = True
    remember_zoomed: bool = True


@dataclass
class ToggleOptions:
    key: str = ";"
    mods: str = "CTRL"
    direction: str = "Up"
    size: str = "20%"
    change_invoker_id_everytime: bool = False
    zoom: ZoomOptions = field(default_factory=ZoomOptions)
    debug_logging: bool = False

    @property
    def key_binding(self) -> str:
        """Render mods + key as a tmux key name, e.g. ``C-;`` or ``C-M-t``."""
        prefix = ""
        for mod in str(self.mods or "").upper().replace(" ", "").split("|"):
            prefix += _MOD_PREFIXES.get(mod, "")
        return prefix + self.key


def merge_options(target: dict, source: dict) -> dict:
    """Merge ``source`` into ``target`` in place.

    Nested tables are merged recursively; keys the target does not already
    have are ignored.
    """
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merge_options(current, value)
        elif key in target and not isinstance(current, dict):
            target[key] = value
    return target


def load_options(overrides: dict | None = None) -> ToggleOptions:
    """Build options from DEFAULTS, the settings file, then ``overrides``."""
    merged = copy.deepcopy(DEFAULTS)
    merge_options(merged, toggle_pane.io.settings.load_settings())
    if overrides:
        merge_options(merged, overrides)
    zoom = merged["zoom"]
    return ToggleOptions(
        key=str(merged["key"]),
        mods=str(merged["mods"] or ""),
        direction=str(merged["direction"]),
        size=str(merged["size"]),
        change_invoker_id_everytime=bool(merged["change_invoker_id_everytime"]),
        zoom=ZoomOptions(
            auto_zoom_toggle_terminal=bool(zoom["auto_zoom_toggle_terminal"]),
            auto_zoom_invoker_pane=bool(zoom["auto_zoom_invoker_pane"]),
            remember_zoomed=bool(zoom["remember_zoomed"]),
        ),
        debug_logging=bool(merged["debug_logging"]),
    )
