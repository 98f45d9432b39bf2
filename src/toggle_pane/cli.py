"""CLI entry point for tmux-toggle-pane.

tmux runs these subcommands from key bindings and hooks (see ``install``):

    toggle --pane %N            create/show/hide the tab's toggle pane
    pane-removed %N [--tab @N]  prune a removed pane from saved state
    tab-removed @N              drop all state for a removed window
"""

import argparse
import logging
import shlex
import sys

from rich.console import Console
from rich.table import Table

from toggle_pane.app.runtime import TogglePane
from toggle_pane.app.tmux_host import format_pane_id, parse_pane_id, parse_tab_id

logger = logging.getLogger(__name__)

# Fixed hook indices so re-running install replaces instead of appending.
_HOOK_INDEX = 77
_PANE_HOOKS = ("pane-exited", "after-kill-pane")
_TAB_HOOKS = ("window-unlinked",)


def _pane_arg(raw: str) -> int:
    try:
        return parse_pane_id(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid pane id {!r} (expected %N)".format(raw))


def _tab_arg(raw: str) -> int:
    try:
        return parse_tab_id(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid window id {!r} (expected @N)".format(raw))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmux-toggle-pane",
        description="Per-window toggleable scratch pane for tmux",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    toggle = sub.add_parser("toggle", help="Create, show, or hide the toggle pane")
    toggle.add_argument(
        "--pane", type=_pane_arg, default=None,
        help="Acting pane id, e.g. %%3 (default: $TMUX_PANE)",
    )

    removed = sub.add_parser("pane-removed", help="Hook: a pane was closed")
    removed.add_argument("pane", type=_pane_arg)
    removed.add_argument("--tab", type=_tab_arg, default=None, help="Owning window id, if known")

    tab_removed = sub.add_parser("tab-removed", help="Hook: a window was closed")
    tab_removed.add_argument("tab", type=_tab_arg)

    install = sub.add_parser("install", help="Register the key binding and hooks in tmux")
    install.add_argument(
        "--dry-run", action="store_true", default=False,
        help="Print the tmux commands instead of running them",
    )

    sub.add_parser("status", help="Show saved toggle state per window")

    clear = sub.add_parser("clear", help="Forget the toggle pane state of one window")
    clear.add_argument("tab", type=_tab_arg)
    return parser


def _self_command() -> str:
    return "{} -m toggle_pane".format(shlex.quote(sys.executable))


def install_commands(key_binding: str, self_command: str | None = None) -> list[list[str]]:
    """tmux commands (argument lists) that wire the key binding and cleanup hooks."""
    exe = self_command or _self_command()
    commands = [
        ["bind-key", "-n", key_binding, "run-shell", "{} toggle --pane '#{{pane_id}}'".format(exe)],
    ]
    for hook in _PANE_HOOKS:
        commands.append([
            "set-hook", "-g", "{}[{}]".format(hook, _HOOK_INDEX),
            "run-shell \"{} pane-removed '#{{hook_pane}}'\"".format(exe),
        ])
    for hook in _TAB_HOOKS:
        commands.append([
            "set-hook", "-g", "{}[{}]".format(hook, _HOOK_INDEX),
            "run-shell \"{} tab-removed '#{{hook_window}}'\"".format(exe),
        ])
    return commands


def render_status(app: TogglePane, console: Console) -> None:
    table = Table(title="tmux-toggle-pane")
    table.add_column("Window")
    table.add_column("Toggle pane")
    table.add_column("Invoker")
    table.add_column("Zoomed")
    rows = app.snapshot()
    for tab_id, state in rows:
        table.add_row(
            "@{}".format(tab_id),
            format_pane_id(state.pane_id) if state.pane_id is not None else "-",
            format_pane_id(state.invoker_id) if state.invoker_id is not None else "-",
            "yes" if state.zoomed else "no",
        )
    if rows:
        console.print(table)
    else:
        console.print("No toggle panes.")


def main(argv=None, app: TogglePane | None = None) -> int:
    args = build_parser().parse_args(argv)
    app = app or TogglePane()
    enabled = app.setup()

    if args.command == "toggle":
        result = app.toggle(args.pane)
        logger.debug("toggle: %r", result)
        return 0 if result.success else 1

    if args.command == "pane-removed":
        app.on_pane_removed(args.pane, args.tab)
        return 0 if enabled else 1

    if args.command == "tab-removed":
        app.on_tab_removed(args.tab)
        return 0 if enabled else 1

    if args.command == "install":
        commands = install_commands(app.options.key_binding)
        if args.dry_run:
            for command in commands:
                print("tmux " + " ".join(shlex.quote(part) for part in command))
            return 0
        ok = all([app.host.command(*command) for command in commands])
        return 0 if ok else 1

    if args.command == "status":
        if not enabled:
            print("tmux-toggle-pane is disabled (state directory unavailable).", file=sys.stderr)
            return 1
        render_status(app, Console())
        return 0

    if args.command == "clear":
        return 0 if app.clear(args.tab) else 1

    return 2
