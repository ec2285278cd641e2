#!/usr/bin/env python3
"""Coach console CLI

Commands:
- status     live focus countdown (Ctrl-C to stop)
- hooks      list hooks with their schedule windows
- save       edit and save a hook's schedule window
- trigger    run a hook now, ignoring its schedule
- context    show the context a hook would send
- results    list hook results, optionally marking some read
- history    recent focus sessions
- health     check that the coach service is up
"""

import argparse
import asyncio
import sys
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from coach_console.config import Settings, load_settings
from coach_console.console import Console
from coach_console.durations import format_duration, format_frequency
from coach_console.errors import ActionResult, ConsoleError
from coach_console.models import LoadState, SessionState
from coach_console.observability import LOG_LEVELS, configure_logging
from coach_console.schedule import FREQUENCY_PRESETS, next_eligible_run
from coach_console.session import SessionPhase


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [
            max(len(str(row[i])) for row in [headers] + rows)
            for i in range(len(headers))
        ]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def format_session(state: SessionState | None, phase: SessionPhase) -> str:
    if state is None:
        return "Connecting..."
    label = "Focusing" if phase is SessionPhase.FOCUSING else "Idle"
    return (
        f"{label:<9} remaining {format_duration(state.remaining_seconds):<10} "
        f"since change {format_duration(state.since_last_change_seconds):<10} "
        f"sessions today {state.sessions_today}"
    )


def report(result: ActionResult, success_text: str) -> int:
    if result.success:
        print(success_text)
        return 0
    print(f"Error: {result.error}")
    return 1


async def cmd_status(console: Console, seconds: float) -> int:
    reconciler = console.session.reconciler
    reconciler.on_change(lambda state: print("\r" + format_session(state, reconciler.phase), end="", flush=True))
    print(format_session(None, reconciler.phase), end="", flush=True)
    await console.start_session()
    if seconds > 0:
        await asyncio.sleep(seconds)
    else:
        await asyncio.Event().wait()
    print()
    return 0


async def _load_hooks(console: Console) -> bool:
    await console.hooks.load()
    if console.hooks.load_state is LoadState.FAILED:
        print(f"Failed to load hooks: {console.hooks.load_error}")
        return False
    return True


async def cmd_hooks(console: Console) -> int:
    if not await _load_hooks(console):
        return 1

    print_header("HOOKS")
    if not console.hooks.hooks:
        print("No hooks registered")
        return 0

    now = datetime.now()
    rows = []
    for hook in console.hooks.hooks:
        window = hook.window
        if window is None:
            rows.append([hook.id, hook.name, "unconfigured", "-", "-", "-"])
            continue
        upcoming = next_eligible_run(window, now)
        rows.append(
            [
                hook.id,
                hook.name,
                "enabled" if window.enabled else "disabled",
                f"{window.first_run:%H:%M}-{window.last_run:%H:%M}",
                format_frequency(window.frequency),
                upcoming.strftime("%a %H:%M") if upcoming else "-",
            ]
        )
    print_table(["ID", "Name", "State", "Window", "Every", "Next eligible"], rows)
    return 0


async def cmd_save(console: Console, args: argparse.Namespace) -> int:
    if not await _load_hooks(console):
        return 1
    if console.hooks.get(args.hook_id) is None:
        print(f"Unknown hook: {args.hook_id}")
        return 1

    changes = {}
    if args.enabled is not None:
        changes["enabled"] = args.enabled
    if args.first_run:
        changes["first_run"] = args.first_run
    if args.last_run:
        changes["last_run"] = args.last_run
    if args.frequency:
        changes["frequency"] = args.frequency

    try:
        if changes:
            console.hooks.edit(args.hook_id, **changes)
        for pair in args.param or []:
            key, sep, value = pair.partition("=")
            if not sep:
                print(f"Expected KEY=VALUE, got {pair!r}")
                return 1
            console.hooks.set_param(args.hook_id, key, value)
    except ValidationError as e:
        print(f"Invalid value: {e.errors()[0]['msg']}")
        return 1

    result = await console.hooks.save_card(args.hook_id)
    return report(result, "Saved")


async def cmd_trigger(console: Console, hook_id: str) -> int:
    if not await _load_hooks(console):
        return 1
    return report(await console.hooks.trigger(hook_id), "Triggered")


async def cmd_context(console: Console, hook_id: str) -> int:
    if not await _load_hooks(console):
        return 1
    result = await console.hooks.toggle_context(hook_id)
    if result.success:
        print(result.data)
        return 0
    return report(result, "")


async def cmd_results(console: Console, mark_read: list[str], unread_only: bool) -> int:
    await console.results.load()
    if console.results.load_state is LoadState.FAILED:
        print(f"Failed to load results: {console.results.load_error}")
        return 1

    exit_code = 0
    for result_id in mark_read:
        exit_code |= report(await console.results.mark_read(result_id), f"Marked {result_id} read")

    results = console.results.results
    if unread_only:
        results = [r for r in results if not r.read]

    print_header(f"HOOK RESULTS ({console.results.unread_count} unread)")
    if not results:
        print("No results")
        return exit_code
    rows = [
        [r.id, r.hook_id, " " if r.read else "●", r.created_at.astimezone().strftime("%Y-%m-%d %H:%M"), r.content]
        for r in results
    ]
    print_table(["ID", "Hook", "New", "Created", "Content"], rows, widths=[15, 12, 3, 16, 60])
    return exit_code


async def cmd_history(console: Console, days: Optional[int]) -> int:
    await console.history.load(days)
    if console.history.load_state is LoadState.FAILED:
        print(f"Failed to load history: {console.history.load_error}")
        return 1

    print_header("RECENT SESSIONS")
    if not console.history.records:
        print(f"No sessions in the last {days or console.history.days} days")
        return 0
    rows = [
        [r.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"), format_duration(r.duration)]
        for r in console.history.records
    ]
    print_table(["Time", "Duration"], rows)
    return 0


async def cmd_health(console: Console) -> int:
    healthy = await console.health()
    print(f"{console.settings.base_url}: {'healthy' if healthy else 'unhealthy'}")
    return 0 if healthy else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="coach-console", description="Focus session and hook console")
    p.add_argument("--config", help="Path to console.yaml")
    p.add_argument("--base-url", help="Coach service URL (overrides config)")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Log verbosity (overrides config)")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("status", help="Live focus countdown")
    s.add_argument("--seconds", type=float, default=0, help="Stop after N seconds (0 = until Ctrl-C)")

    sub.add_parser("hooks", help="List hooks")

    presets = ", ".join(value for _, value in FREQUENCY_PRESETS)
    sv = sub.add_parser("save", help="Edit and save a hook schedule")
    sv.add_argument("hook_id")
    sv.add_argument("--enable", dest="enabled", action="store_true", default=None)
    sv.add_argument("--disable", dest="enabled", action="store_false")
    sv.add_argument("--first-run", help="HH:MM")
    sv.add_argument("--last-run", help="HH:MM")
    sv.add_argument("--frequency", help=f"Duration, e.g. {presets}")
    sv.add_argument("--param", action="append", metavar="KEY=VALUE")

    t = sub.add_parser("trigger", help="Run a hook now")
    t.add_argument("hook_id")

    c = sub.add_parser("context", help="Show a hook's context preview")
    c.add_argument("hook_id")

    r = sub.add_parser("results", help="List hook results")
    r.add_argument("--mark-read", action="append", default=[], metavar="ID")
    r.add_argument("--unread", action="store_true", help="Only unread results")

    h = sub.add_parser("history", help="Recent focus sessions")
    h.add_argument("--days", type=int)

    sub.add_parser("health", help="Probe the coach service")
    return p


async def run(args: argparse.Namespace, settings: Settings) -> int:
    async with Console(settings) as console:
        if args.cmd == "status":
            return await cmd_status(console, args.seconds)
        if args.cmd == "hooks":
            return await cmd_hooks(console)
        if args.cmd == "save":
            return await cmd_save(console, args)
        if args.cmd == "trigger":
            return await cmd_trigger(console, args.hook_id)
        if args.cmd == "context":
            return await cmd_context(console, args.hook_id)
        if args.cmd == "results":
            return await cmd_results(console, args.mark_read, args.unread)
        if args.cmd == "history":
            return await cmd_history(console, args.days)
        if args.cmd == "health":
            return await cmd_health(console)
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings(args.config)
    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_level, json_format=settings.log_json)

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print()
        return 0
    except ConsoleError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
