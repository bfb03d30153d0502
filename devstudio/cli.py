"""Command-line front door for devstudio.

Builds a workspace engine over the default template or a local folder, then
prints the project tree and/or runs the project in a local-process sandbox,
streaming sanitized output until interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
import sys
from pathlib import Path

from .config import LOG_LEVELS, WorkspaceSettings, load_settings, save_settings
from .file_tree_model import format_tree
from .local_fs import LocalBridge, StaticDirectoryPicker
from .session import LineType, LocalProcessSandbox, SessionBootError, SessionRuntime, TerminalLine, consume
from .workspace import WorkspaceEngine


def _command(value: str) -> tuple[str, ...]:
    """argparse type for a shell-quoted command line."""
    try:
        parts = tuple(shlex.split(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid command: {value!r}") from exc
    if not parts:
        raise argparse.ArgumentTypeError("command must not be empty")
    return parts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load a web project into a workspace and run it in a local sandbox."
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Local project folder. Defaults to the built-in Vite + React template.",
    )
    parser.add_argument("--tree", action="store_true", help="Print the project tree.")
    parser.add_argument("--run", action="store_true", help="Install and start the project, streaming output.")
    parser.add_argument("--install-command", type=_command, default=None, help="Override the install command.")
    parser.add_argument("--start-command", type=_command, default=None, help="Override the start command.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper, default=None, help="Diagnostic log level.")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective commands and log level as the new defaults.",
    )
    return parser


def resolve_settings(args: argparse.Namespace, base: WorkspaceSettings) -> WorkspaceSettings:
    """Apply CLI overrides on top of persisted settings."""
    return WorkspaceSettings(
        install_command=args.install_command or base.install_command,
        start_command=args.start_command or base.start_command,
        ignore_filename=base.ignore_filename,
        log_level=args.log_level or base.log_level,
    )


def build_engine(path: Path | None, settings: WorkspaceSettings) -> WorkspaceEngine:
    session = SessionRuntime(
        LocalProcessSandbox.boot,
        install_command=settings.install_command,
        start_command=settings.start_command,
    )
    bridge = LocalBridge(StaticDirectoryPicker(path), ignore_filename=settings.ignore_filename)
    return WorkspaceEngine(bridge, session)


def _print_line(line: TerminalLine) -> None:
    stream = sys.stderr if line.type == LineType.STDERR else sys.stdout
    prefix = "$ " if line.type == LineType.COMMAND else ""
    text = line.content if line.content.endswith("\n") else line.content + "\n"
    stream.write(prefix + text)
    stream.flush()


async def _run(engine: WorkspaceEngine, path: Path | None, show_tree: bool, run: bool) -> int:
    printer = asyncio.create_task(consume(engine.session.output, _print_line))
    try:
        engine.init()
        if path is not None and not await engine.open_folder():
            engine.session.emit(f"Could not open folder: {path}", LineType.STDERR)
            return 1
        if show_tree or not run:
            sys.stdout.write(format_tree(engine.tree()) + "\n")
        if not run:
            return 0
        try:
            started = await engine.run()
        except SessionBootError:
            return 1
        if not started:
            return 1
        while True:
            await asyncio.sleep(3600)
    finally:
        await engine.teardown()
        engine.session.output.close()
        await printer


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and run the requested workspace actions."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = resolve_settings(args, load_settings())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.save_settings and not save_settings(settings):
        sys.stderr.write("Could not save settings\n")

    path: Path | None = None
    if args.path is not None:
        path = Path(args.path)
        if not path.is_dir():
            raise SystemExit(f"Not a directory: {path}")

    engine = build_engine(path, settings)
    try:
        return asyncio.run(_run(engine, path, args.tree, args.run))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
