"""Turn a parsed :class:`Pipeline` into running processes."""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from dataclasses import dataclass, field

from .config import DEFAULT_CREATE_MODE
from .exceptions import FatalShellError, RedirectionError
from .shell_parser import InputRedirect, OutputRedirect, Pipeline, PipelineStage

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_SPAWN_FAILED = 1


@dataclass
class StageProcess:
    """Handle for one spawned stage; ``process`` is ``None`` if the spawn failed."""

    stage: PipelineStage
    process: subprocess.Popen[bytes] | None
    status: int | None = None

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process is not None else None

    def wait(self) -> int:
        if self.status is not None:
            return self.status
        if self.process is None:
            raise RuntimeError(f"{self.stage.program} was never started")
        returncode = self.process.wait()
        # Negative return codes mean the child was killed by a signal.
        self.status = 128 - returncode if returncode < 0 else returncode
        logger.debug("reaped pid=%s status=%s", self.process.pid, self.status)
        return self.status


@dataclass
class PipelineRun:
    statuses: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return self.statuses[-1] if self.statuses else 0


class PipelineExecutor:
    """Spawns one process per stage and reaps all of them before returning.

    Every stage is spawned before any is waited on, so a stage that writes
    more than a pipe buffer never blocks on a reader that does not exist yet.
    ``wait_each_stage`` restores the older fork-then-wait ordering.
    """

    def __init__(
        self,
        *,
        create_mode: int = DEFAULT_CREATE_MODE,
        wait_each_stage: bool = False,
    ) -> None:
        self.create_mode = create_mode
        self.wait_each_stage = wait_each_stage

    def run(self, pipeline: Pipeline) -> PipelineRun:
        report = PipelineRun()
        if pipeline.is_empty:
            return report
        for output in pipeline.discarded_outputs:
            self._touch(output)
        stdin_fd = self._open_input(pipeline.stdin) if pipeline.stdin else None
        try:
            stdout_fd = self._open_output(pipeline.stdout) if pipeline.stdout else None
        except RedirectionError:
            if stdin_fd is not None:
                os.close(stdin_fd)
            raise
        handles: list[StageProcess] = []
        try:
            self._spawn_all(pipeline.stages, stdin_fd, stdout_fd, handles, report)
        except BaseException:
            # Stages already running are still reaped before the error escapes.
            for handle in handles:
                handle.wait()
            raise
        report.statuses = [handle.wait() for handle in handles]
        return report

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------
    def _spawn_all(
        self,
        stages: list[PipelineStage],
        stdin_fd: int | None,
        stdout_fd: int | None,
        handles: list[StageProcess],
        report: PipelineRun,
    ) -> None:
        last = len(stages) - 1
        upstream = stdin_fd
        pending: list[int] = [fd for fd in (stdin_fd, stdout_fd) if fd is not None]
        try:
            for idx, stage in enumerate(stages):
                if idx == last:
                    read_fd, write_fd = None, stdout_fd
                else:
                    try:
                        read_fd, write_fd = os.pipe()
                    except OSError as exc:
                        raise FatalShellError(f"pipe(): {exc.strerror}") from exc
                    pending.extend((read_fd, write_fd))
                handle = self._spawn(stage, upstream, write_fd, report)
                handles.append(handle)
                for fd, is_pipe in ((upstream, idx > 0), (write_fd, idx < last)):
                    if fd is None:
                        continue
                    pending.remove(fd)
                    self._close_parent_copy(fd, is_pipe=is_pipe)
                upstream = read_fd
                if self.wait_each_stage and handle.process is not None:
                    handle.wait()
        except BaseException:
            for fd in pending:
                with contextlib.suppress(OSError):
                    os.close(fd)
            raise

    def _spawn(
        self,
        stage: PipelineStage,
        stdin: int | None,
        stdout: int | None,
        report: PipelineRun,
    ) -> StageProcess:
        try:
            process = subprocess.Popen(list(stage.argv), stdin=stdin, stdout=stdout, close_fds=True)
        except FileNotFoundError as exc:
            return self._failed(stage, f"{stage.program}: {exc.strerror}", EXIT_NOT_FOUND, report)
        except PermissionError as exc:
            return self._failed(stage, f"{stage.program}: {exc.strerror}", EXIT_NOT_EXECUTABLE, report)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            return self._failed(stage, f"{stage.program}: {exc}", EXIT_SPAWN_FAILED, report)
        logger.debug("spawned pid=%s argv=%s", process.pid, stage.argv)
        return StageProcess(stage, process)

    def _failed(
        self, stage: PipelineStage, message: str, status: int, report: PipelineRun
    ) -> StageProcess:
        logger.warning("could not start %s: %s", stage.program, message)
        report.errors.append(message)
        return StageProcess(stage, None, status)

    def _close_parent_copy(self, fd: int, *, is_pipe: bool) -> None:
        try:
            os.close(fd)
        except OSError as exc:
            if is_pipe:
                raise FatalShellError(f"close(): {exc.strerror}") from exc
            logger.warning("close(%s) failed: %s", fd, exc.strerror)

    # ------------------------------------------------------------------
    # Redirection files
    # ------------------------------------------------------------------
    def _open(self, path: str, flags: int) -> int:
        try:
            return os.open(path, flags, self.create_mode)
        except OSError as exc:
            logger.warning("open(%s) failed: %s", path, exc.strerror)
            raise RedirectionError(path, exc.strerror or str(exc)) from exc
        except ValueError as exc:
            logger.warning("open(%r) failed: %s", path, exc)
            raise RedirectionError(path, str(exc)) from exc

    def _open_input(self, redirect: InputRedirect) -> int:
        return self._open(redirect.path, os.O_RDONLY)

    def _open_output(self, redirect: OutputRedirect) -> int:
        return self._open(redirect.path, redirect.mode.flags)

    def _touch(self, redirect: OutputRedirect) -> None:
        os.close(self._open_output(redirect))


__all__ = ["PipelineExecutor", "PipelineRun", "StageProcess"]
