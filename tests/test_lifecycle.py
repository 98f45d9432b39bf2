"""Tests for lifecycle — pane/tab removal pruning outside of toggles."""

import pytest

from toggle_pane.app.lifecycle import LifecycleHooks
from toggle_pane.app.state_cache import StateCache
from toggle_pane.app.toggle_engine import ToggleAction
from toggle_pane.app.toggle_state import ToggleState

A, B, TAB = 10, 11, 1


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def hooks(host, cache):
    return LifecycleHooks(host, cache)


@pytest.fixture
def shown(engine):
    """Toggle pane 100 created from A and currently shown."""
    engine.toggle(A, TAB)
    return engine


class TestPaneRemoved:
    def test_invoker_removed_while_shown(self, shown, host, hooks, cache, store):
        host.remove_pane(A)
        assert hooks.on_pane_removed(A, TAB) is True
        assert cache.get(TAB) == ToggleState(pane_id=100, invoker_id=None)
        assert store.load(TAB) == ToggleState(pane_id=100, invoker_id=None)

    def test_toggle_after_invoker_removed_rederives_invoker(self, shown, host, hooks, cache):
        host.remove_pane(A)
        hooks.on_pane_removed(A, TAB)

        result = shown.toggle(100, TAB)
        assert result.action == ToggleAction.CREATED
        assert cache.get(TAB).invoker_id == 100

    def test_toggle_pane_removed(self, shown, host, hooks, cache, store):
        cache.get(TAB).zoomed = True
        host.remove_pane(100)
        assert hooks.on_pane_removed(100, TAB) is True
        assert cache.get(TAB) == ToggleState(pane_id=None, invoker_id=A, zoomed=False)
        assert not store.exists(TAB)

    def test_pane_that_was_toggle_and_invoker(self, host, hooks, cache):
        state = cache.get(TAB)
        state.pane_id, state.invoker_id = B, B
        host.remove_pane(B)
        assert hooks.on_pane_removed(B, TAB) is True
        assert TAB not in cache

    def test_unrelated_pane(self, shown, host, hooks, cache):
        host.remove_pane(B)
        assert hooks.on_pane_removed(B, TAB) is False
        assert cache.get(TAB) == ToggleState(pane_id=100, invoker_id=A)

    def test_unknown_tab(self, host, hooks, cache):
        host.remove_pane(B)
        assert hooks.on_pane_removed(B, 42) is False
        assert 42 not in cache

    def test_tab_resolved_through_host(self, shown, hooks, cache):
        # Hook fired before tmux forgot the pane.
        assert hooks.on_pane_removed(A) is True
        assert cache.get(TAB).invoker_id is None


class TestPaneRemovedFreshProcess:
    """Each tmux hook runs in a new process with an empty cache."""

    def test_invoker_removed(self, make_engine, host, store):
        engine = make_engine()
        engine.toggle(A, TAB)
        engine.toggle(100, TAB)
        engine.toggle(A, TAB)
        host.remove_pane(A)

        fresh_cache = StateCache(store)
        assert LifecycleHooks(host, fresh_cache).on_pane_removed(A, TAB) is True
        assert store.read(TAB) == ToggleState(pane_id=100, invoker_id=None)
        assert TAB not in fresh_cache

    def test_toggle_pane_removed(self, shown, host, store):
        host.remove_pane(100)
        assert LifecycleHooks(host, StateCache(store)).on_pane_removed(100, TAB) is True
        assert not store.exists(TAB)

    def test_unrelated_pane(self, shown, host, store):
        host.remove_pane(B)
        assert LifecycleHooks(host, StateCache(store)).on_pane_removed(B, TAB) is False
        assert store.read(TAB) == ToggleState(pane_id=100, invoker_id=A)

    def test_scan_invoker_removed(self, shown, host, store):
        host.remove_pane(A)
        fresh_cache = StateCache(store)
        assert LifecycleHooks(host, fresh_cache).on_pane_removed(A) is True
        assert store.read(TAB) == ToggleState(pane_id=100, invoker_id=None)
        assert TAB not in fresh_cache


class TestPaneRemovedScan:
    def test_scan_cached_states(self, shown, host, hooks, cache):
        host.remove_pane(A)
        assert hooks.on_pane_removed(A) is True
        assert cache.get(TAB) == ToggleState(pane_id=100, invoker_id=None)

    def test_scan_covers_other_tabs(self, make_engine, host, hooks, cache):
        host.add_pane(2, 20)
        engine = make_engine()
        engine.toggle(A, TAB)
        engine.toggle(20, 2)
        removed = cache.get(2).pane_id
        host.remove_pane(removed)

        assert hooks.on_pane_removed(removed) is True
        assert cache.get(2) == ToggleState(pane_id=None, invoker_id=20)
        assert cache.get(TAB).pane_id == 100

    def test_scan_in_fresh_process_heals_disk(self, shown, host, store):
        host.remove_pane(100)
        fresh = LifecycleHooks(host, StateCache(store))
        fresh.on_pane_removed(100)
        assert not store.exists(TAB)


class TestTabRemoved:
    def test_clears_memory_and_disk(self, shown, host, hooks, cache, store):
        host.close_tab(TAB)
        assert hooks.on_tab_removed(TAB) is True
        assert TAB not in cache
        assert not store.exists(TAB)

    def test_repeat_is_noop(self, shown, host, hooks, cache, store):
        host.close_tab(TAB)
        hooks.on_tab_removed(TAB)
        assert hooks.on_tab_removed(TAB) is False
        assert TAB not in cache
        assert not store.exists(TAB)

    def test_disk_only_state(self, shown, host, store):
        host.close_tab(TAB)
        fresh_cache = StateCache(store)
        assert LifecycleHooks(host, fresh_cache).on_tab_removed(TAB) is True
        assert not store.exists(TAB)

    def test_never_toggled_tab(self, hooks):
        assert hooks.on_tab_removed(9) is False

    def test_window_moved_to_other_session_keeps_state(self, shown, hooks, cache, store):
        # window-unlinked fires for move-window too; the window is still there.
        assert hooks.on_tab_removed(TAB) is False
        assert cache.get(TAB) == ToggleState(pane_id=100, invoker_id=A)
        assert store.exists(TAB)
