"""
CLI Adapter - Command-line interface.

Thin wrapper over loader + sequencer.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Iterator

from visual_novel.adapters.loader import NovelSession, StoryLoader
from visual_novel.config import Config
from visual_novel.monitoring.logging import configure_logging
from visual_novel.runtime.ducking import duck
from visual_novel.runtime.scheduler import AsyncioScheduler, ManualScheduler
from visual_novel.runtime.sequencer import SequencerState
from visual_novel.stage.panel import ContentPanel
from visual_novel.story.records import parse_percent


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="visual-novel",
        description="Play branching visual novels written as spreadsheets",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Event log level (default: warning)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit event logs as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # play command
    play_parser = subparsers.add_parser("play", help="Play a story in the terminal")
    play_parser.add_argument("table", nargs="?", default="story.csv", help="Story table (path or URL)")
    play_parser.add_argument("--root", help="Story root holding images/ and audio/ (default: table's folder)")
    play_parser.add_argument(
        "--choices",
        help="Comma-separated choice numbers to play without prompting (e.g. 1,2,1)",
    )
    play_parser.add_argument(
        "--realtime",
        action="store_true",
        help="Wait for transitions and effects in real time",
    )

    # check command
    check_parser = subparsers.add_parser("check", help="Report missing targets and assets")
    check_parser.add_argument("table", nargs="?", default="story.csv", help="Story table path")
    check_parser.add_argument("--root", help="Story root (default: table's folder)")

    # duck command
    duck_parser = subparsers.add_parser("duck", help="Show volumes for an effect level")
    duck_parser.add_argument("percent", help="Requested effect volume in percent")
    duck_parser.add_argument(
        "--base",
        type=float,
        default=None,
        help="Base music volume (default: configured level)",
    )

    # version command
    subparsers.add_parser("version", help="Show version")

    parsed = parser.parse_args(args)

    configure_logging(parsed.log_level, json_format=parsed.json_logs)
    logging.basicConfig(level=parsed.log_level.upper())

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.command == "version":
        from visual_novel import __version__
        print(f"visual-novel {__version__}")
        return 0

    if parsed.command == "duck":
        return _cmd_duck(parsed)

    if parsed.command == "check":
        return _cmd_check(parsed)

    if parsed.command == "play":
        return _cmd_play(parsed)

    return 1


def _story_root(table: str, root: str | None) -> Path:
    if root:
        return Path(root)
    if table.startswith(("http://", "https://")):
        return Path.cwd()
    return Path(table).parent


def render_panel(panel: ContentPanel, not_found: bool = False) -> str:
    """Format the revealed panel for the terminal.

    A missing-scene diagnostic is shown without the ending marker.
    """
    lines = ["", panel.text, ""]
    for number, control in enumerate(panel.choices, 1):
        lines.append(f"  [{number}] {control.label}")
    if not panel.choices and not not_found:
        lines.append("  -- THE END --")
    return "\n".join(lines)


def _scripted(choices: str | None) -> Iterator[str] | None:
    if choices is None:
        return None
    return iter(c.strip() for c in choices.split(",") if c.strip())


def _pick(panel: ContentPanel, answer: str) -> int | None:
    try:
        index = int(answer) - 1
    except ValueError:
        return None
    if 0 <= index < len(panel.choices):
        return index
    return None


def _cmd_play(args: argparse.Namespace) -> int:
    """Play a story."""
    config = Config(story_root=_story_root(args.table, args.root))
    script = _scripted(args.choices)

    if args.realtime:
        return asyncio.run(_play_realtime(args.table, config, script))
    return _play_fast(args.table, config, script)


def _load(session: NovelSession, table: str) -> bool:
    result = session.load(table)
    if not result.ok:
        print(f"{session.entry.label}", file=sys.stderr)
        if result.error:
            print(f"Error: {result.error}", file=sys.stderr)
        return False
    return True


def _next_answer(script: Iterator[str] | None, read: Callable[[], str]) -> str | None:
    if script is not None:
        return next(script, None)
    try:
        return read()
    except EOFError:
        return None


def _play_fast(table: str, config: Config, script: Iterator[str] | None) -> int:
    """Play with timers fast-forwarded on a virtual clock."""
    scheduler = ManualScheduler()
    session = NovelSession(scheduler, config=config, loader=StoryLoader(on_alert=_alert))
    if not _load(session, table):
        return 1

    session.start()
    while True:
        scheduler.run_until_idle()
        sequencer = session.sequencer
        panel = sequencer.panel
        state = sequencer.current
        not_found = state is not None and state.state is SequencerState.NOT_FOUND
        print(render_panel(panel, not_found=not_found))
        if not_found:
            return 1
        if not panel.choices:
            return 0

        index = None
        while index is None:
            answer = _next_answer(script, lambda: input("> "))
            if answer is None:
                return 0
            index = _pick(panel, answer)
        panel.select(index)


async def _play_realtime(table: str, config: Config, script: Iterator[str] | None) -> int:
    """Play on an asyncio loop with real waits."""
    loop = asyncio.get_running_loop()
    scheduler = AsyncioScheduler(loop)
    session = NovelSession(scheduler, config=config, loader=StoryLoader(on_alert=_alert))
    if not _load(session, table):
        return 1

    sequencer = session.sequencer
    panel = sequencer.panel
    revealed = asyncio.Event()
    panel.add_reveal_listener(lambda _: revealed.set())

    session.start()
    while True:
        await revealed.wait()
        revealed.clear()
        state = sequencer.current
        not_found = state is not None and state.state is SequencerState.NOT_FOUND
        print(render_panel(panel, not_found=not_found))
        if not_found:
            return 1
        if not panel.choices:
            return 0

        index = None
        while index is None:
            if script is not None:
                answer = next(script, None)
            else:
                try:
                    answer = await asyncio.to_thread(input, "> ")
                except EOFError:
                    answer = None
            if answer is None:
                return 0
            index = _pick(panel, answer)
        panel.select(index)


def _alert(message: str) -> None:
    print(message, file=sys.stderr)


def _cmd_check(args: argparse.Namespace) -> int:
    """Report missing targets and assets."""
    from visual_novel.adapters.asset_validator import generate_story_report, validate_story
    from visual_novel.stage.assets import AssetResolver

    config = Config(story_root=_story_root(args.table, args.root))
    loader = StoryLoader(on_alert=_alert)
    result = loader.load(args.table)
    if not result.ok:
        print(f"{loader.entry.label}", file=sys.stderr)
        return 1

    report = validate_story(result.graph, AssetResolver.from_config(config))
    print(generate_story_report(report))
    return 0 if report.ok else 1


def _cmd_duck(args: argparse.Namespace) -> int:
    """Show effect and music volumes for a requested effect level."""
    base = args.base if args.base is not None else Config().base_music_volume
    if parse_percent(args.percent) is None:
        print(f"Error: percent must be a number, got {args.percent!r}", file=sys.stderr)
        return 1

    result = duck(args.percent, base)

    print(f"Effect volume: {result.effect_volume * 100:.0f}%")
    print(f"Music volume:  {result.music_volume * 100:.1f}% (base {base * 100:.1f}%)")
    if result.is_ducked:
        print("Music is ducked")
    return 0


if __name__ == "__main__":
    sys.exit(main())
