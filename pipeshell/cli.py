"""Command-line interface for pipeshell."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import DEFAULT_MAX_ARGS, ShellConfig
from .exceptions import FatalShellError
from .prompt import EXIT_BANNER, START_BANNER, read_line, render_prompt
from .shell import CommandResult, Shell


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-args",
        type=int,
        default=DEFAULT_MAX_ARGS,
        help="Maximum number of words per command (default: %(default)s).",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Wait for each pipeline stage before starting the next one.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity written to stderr.",
    )


def _build_config(args: argparse.Namespace) -> ShellConfig:
    return ShellConfig(
        max_args=args.max_args,
        wait_each_stage=args.sequential,
        prompt=getattr(args, "prompt", None),
        banner=not getattr(args, "no_banner", False),
    )


def _report(result: CommandResult) -> None:
    if result.stderr:
        sys.stderr.write(result.stderr.rstrip("\n") + "\n")
        sys.stderr.flush()


def _run_exec(args: argparse.Namespace, config: ShellConfig) -> int:
    shell = Shell(config)
    try:
        result = shell.execute(args.command)
    except FatalShellError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    _report(result)
    return result.exit_code


def _run_shell(args: argparse.Namespace, config: ShellConfig) -> int:
    shell = Shell(config)
    if config.banner:
        sys.stdout.write(START_BANNER + "\n")
    try:
        while True:
            sys.stdout.write(config.prompt if config.prompt is not None else render_prompt())
            sys.stdout.flush()
            line = read_line(sys.stdin)
            if line is None:
                break
            if not line.strip():
                continue
            _report(shell.execute(line))
    except FatalShellError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    if config.banner:
        sys.stdout.write(EXIT_BANNER + "\n")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="pipeshell")
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    _add_common_flags(exec_parser)
    exec_parser.add_argument("command", help="Command line to execute")
    exec_parser.set_defaults(func=_run_exec)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive shell")
    _add_common_flags(shell_parser)
    shell_parser.add_argument("--prompt", default=None, help="Use a fixed prompt string.")
    shell_parser.add_argument("--no-banner", action="store_true", help="Skip start/exit banners.")
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    try:
        config = _build_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    exit_code = args.func(args, config)
    raise SystemExit(exit_code)


__all__ = ["main"]
