"""Tunables for the shell."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_ARGS = 10
DEFAULT_CREATE_MODE = 0o666


@dataclass(frozen=True)
class ShellConfig:
    """Controls parsing limits, file creation and process orchestration."""

    max_args: int = DEFAULT_MAX_ARGS
    create_mode: int = DEFAULT_CREATE_MODE
    # Wait for every stage before spawning the next one, like the classic
    # fork/wait loop. Large outputs can fill the pipe and hang the pipeline.
    wait_each_stage: bool = False
    prompt: str | None = None
    banner: bool = True

    def __post_init__(self) -> None:
        if self.max_args < 1:
            raise ValueError("max_args must be at least 1")
        if not 0 <= self.create_mode <= 0o7777:
            raise ValueError(f"Invalid create mode {oct(self.create_mode)}")


__all__ = ["ShellConfig", "DEFAULT_MAX_ARGS", "DEFAULT_CREATE_MODE"]
