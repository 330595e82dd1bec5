"""Core Shell implementation."""

from __future__ import annotations

import logging

from ..config import ShellConfig
from ..exceptions import ParseError, RedirectionError
from ..executor import PipelineExecutor
from ..shell_parser import PipelineParser
from ..tokenizer import tokenize
from .common import EXIT_RESOURCE, EXIT_USAGE, CommandResult

logger = logging.getLogger(__name__)


class Shell:
    """Parses one command line at a time and runs it as a process pipeline."""

    def __init__(
        self,
        config: ShellConfig | None = None,
        *,
        parser: PipelineParser | None = None,
        executor: PipelineExecutor | None = None,
    ) -> None:
        self.config = config or ShellConfig()
        self.parser = parser or PipelineParser(max_args=self.config.max_args)
        self.executor = executor or PipelineExecutor(
            create_mode=self.config.create_mode,
            wait_each_stage=self.config.wait_each_stage,
        )

    def execute(self, line: str) -> CommandResult:
        """Run ``line`` and wait for every process it started.

        Grammar and redirection errors come back as a failed result with a
        diagnostic; :class:`~pipeshell.exceptions.FatalShellError` propagates.
        """

        tokens = tokenize(line)
        if not tokens:
            return CommandResult()
        logger.debug("tokens: %s", tokens)
        try:
            pipeline = self.parser.parse(tokens)
        except ParseError as exc:
            self.parser.reset()
            return CommandResult.failure(str(exc), EXIT_USAGE)
        try:
            run = self.executor.run(pipeline)
        except RedirectionError as exc:
            return CommandResult.failure(str(exc), EXIT_RESOURCE)
        return CommandResult(
            exit_code=run.exit_code,
            stderr="\n".join(run.errors),
            statuses=run.statuses,
        )


__all__ = ["Shell"]
