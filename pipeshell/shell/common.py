"""Shared shell types."""

from __future__ import annotations

from dataclasses import dataclass, field

EXIT_USAGE = 2
EXIT_RESOURCE = 1


@dataclass(slots=True)
class CommandResult:
    exit_code: int = 0
    stderr: str = ""
    statuses: list[int] = field(default_factory=list)
    # False when the line was abandoned before any process ran.
    ok: bool = True

    @classmethod
    def failure(cls, message: str, exit_code: int) -> "CommandResult":
        return cls(exit_code=exit_code, stderr=message, ok=False)


__all__ = ["CommandResult", "EXIT_USAGE", "EXIT_RESOURCE"]
