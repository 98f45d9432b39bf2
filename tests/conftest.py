"""Pytest configuration and shared fixtures for tmux-toggle-pane tests.

No tmux required: FakeHost models windows, panes, focus and zoom in memory
with the same surface as TmuxHost.
"""

import pytest

import toggle_pane.io.logging_setup
from toggle_pane.app.options import ToggleOptions, ZoomOptions
from toggle_pane.app.state_cache import StateCache
from toggle_pane.app.toggle_engine import ToggleEngine
from toggle_pane.app.validator import PaneValidator
from toggle_pane.io.state_store import StateStore


class FakeHost:
    """In-memory stand-in for TmuxHost."""

    def __init__(self):
        self.panes: dict[int, int] = {}   # pane id → tab id
        self.active: dict[int, int] = {}  # tab id → active pane id
        self.zoomed: dict[int, bool] = {}  # tab id → window zoom flag
        self.next_pane_id = 100
        self.fail_split = False
        self.fail_activate = False
        self.splits: list[tuple[int, str, str]] = []
        self.notifications: list[tuple[str, str]] = []
        self.commands: list[tuple[str, ...]] = []

    # ─── test setup helpers ──────────────────────────────────────────────

    def add_pane(self, tab_id: int, pane_id: int) -> int:
        self.panes[pane_id] = tab_id
        self.active.setdefault(tab_id, pane_id)
        self.zoomed.setdefault(tab_id, False)
        return pane_id

    def remove_pane(self, pane_id: int) -> None:
        tab_id = self.panes.pop(pane_id)
        if self.active.get(tab_id) == pane_id:
            remaining = [p for p, t in self.panes.items() if t == tab_id]
            if remaining:
                self.active[tab_id] = remaining[0]
            else:
                self.active.pop(tab_id, None)
            self.zoomed[tab_id] = False

    def close_tab(self, tab_id: int) -> None:
        for pane_id in [p for p, t in self.panes.items() if t == tab_id]:
            self.remove_pane(pane_id)

    def user_zoom(self, tab_id: int, zoomed: bool) -> None:
        """Simulate the user pressing prefix-z."""
        self.zoomed[tab_id] = zoomed

    # ─── TmuxHost surface ────────────────────────────────────────────────

    def find_pane(self, pane_id):
        return pane_id if pane_id in self.panes else None

    def tab_of(self, pane_id):
        return self.panes.get(pane_id)

    def window_exists(self, tab_id):
        return tab_id in self.panes.values()

    def zoomed_pane(self, tab_id):
        if self.zoomed.get(tab_id):
            return self.active.get(tab_id)
        return None

    def activate(self, pane_id):
        if self.fail_activate or pane_id not in self.panes:
            return False
        tab_id = self.panes[pane_id]
        if self.active.get(tab_id) != pane_id:
            # tmux drops zoom when focus moves to another pane.
            self.zoomed[tab_id] = False
        self.active[tab_id] = pane_id
        return True

    def set_zoomed(self, tab_id, zoomed):
        if tab_id not in self.zoomed:
            return False
        self.zoomed[tab_id] = bool(zoomed)
        return True

    def split(self, pane_id, direction, size):
        self.splits.append((pane_id, direction, size))
        if self.fail_split or pane_id not in self.panes:
            return None
        tab_id = self.panes[pane_id]
        new_pane = self.next_pane_id
        self.next_pane_id += 1
        self.panes[new_pane] = tab_id
        self.active[tab_id] = new_pane
        self.zoomed[tab_id] = False
        return new_pane

    def notify(self, title, message):
        self.notifications.append((title, message))

    def command(self, *args):
        self.commands.append(args)
        return True


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point every XDG/log path at tmp_path and reset logging afterwards."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state-home"))
    monkeypatch.setenv("TOGGLE_PANE_LOG_DIR", str(tmp_path / "logs"))
    for name in ("TOGGLE_PANE_STATE_DIR", "TOGGLE_PANE_LOG_FILE", "TOGGLE_PANE_LOG_LEVEL", "TMUX_PANE"):
        monkeypatch.delenv(name, raising=False)
    yield
    toggle_pane.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def host():
    """FakeHost with window 1 holding pane 10 (A) and pane 11 (B)."""
    fake = FakeHost()
    fake.add_pane(1, 10)
    fake.add_pane(1, 11)
    return fake


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "toggle_state"


@pytest.fixture
def validator(host):
    return PaneValidator(host)


@pytest.fixture
def store(state_dir, validator):
    s = StateStore(state_dir, validator)
    assert s.ensure_directory() is True
    return s


@pytest.fixture
def cache(store):
    return StateCache(store)


@pytest.fixture
def make_engine(host, cache, validator):
    """Factory fixture: ToggleEngine with option overrides.

    Zoom keys (auto_zoom_toggle_terminal, auto_zoom_invoker_pane,
    remember_zoomed) are routed into ZoomOptions.
    """
    zoom_keys = {"auto_zoom_toggle_terminal", "auto_zoom_invoker_pane", "remember_zoomed"}

    def _factory(**overrides) -> ToggleEngine:
        zoom = ZoomOptions(**{k: v for k, v in overrides.items() if k in zoom_keys})
        opts = ToggleOptions(zoom=zoom, **{k: v for k, v in overrides.items() if k not in zoom_keys})
        return ToggleEngine(host, cache, validator, opts)

    return _factory
