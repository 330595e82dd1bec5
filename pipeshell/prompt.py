"""Prompt rendering and line input for the interactive loop."""

from __future__ import annotations

import os
import socket
from pathlib import Path
from typing import TextIO

EXIT_DIRECTIVE = "exit"
BASIC_PROMPT = "SHELL$ "

START_BANNER = """
  |  Shell Implementation  |
  |   pipes & redirection  |
"""
EXIT_BANNER = """
...Exiting shell
Exited shell!
"""


def render_prompt(env: dict[str, str] | None = None) -> str:
    environ = os.environ if env is None else env
    user = environ.get("USER")
    try:
        hostname = socket.gethostname()
        cwd = os.getcwd()
    except OSError:
        return BASIC_PROMPT
    if not user or not hostname:
        return BASIC_PROMPT
    directory = Path(cwd).name or "/"
    return f"[{user}@{hostname} {directory}] JSHELL$ "


def read_line(stream: TextIO) -> str | None:
    """Return the next line without its newline, or ``None`` on EOF or ``exit``."""

    raw = stream.readline()
    if not raw:
        return None
    line = raw[:-1] if raw.endswith("\n") else raw
    if line.strip() == EXIT_DIRECTIVE:
        return None
    return line


__all__ = [
    "BASIC_PROMPT",
    "EXIT_BANNER",
    "EXIT_DIRECTIVE",
    "START_BANNER",
    "read_line",
    "render_prompt",
]
