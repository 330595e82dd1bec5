"""Exceptions raised by pipeshell."""

from __future__ import annotations


class ShellError(Exception):
    """Base class for shell errors."""


class ParseError(ShellError):
    """Raised when a command line violates the pipeline grammar."""


class RedirectionError(ShellError):
    """Raised when a redirection file cannot be opened by the shell."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"open(): {path}: {reason}")
        self.path = path
        self.reason = reason


class FatalShellError(ShellError):
    """The shell's own descriptors are in an unknown state; the session must end."""


__all__ = ["ShellError", "ParseError", "RedirectionError", "FatalShellError"]
