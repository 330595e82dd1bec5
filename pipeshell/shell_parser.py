"""Pipeline parser: a token-driven state machine for ``<``, ``>``, ``>>`` and ``|``."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .config import DEFAULT_MAX_ARGS
from .exceptions import ParseError
from .tokenizer import APPEND_REDIRECT, INPUT_REDIRECT, OUTPUT_REDIRECT, PIPE, tokenize

logger = logging.getLogger(__name__)


class ParserState(Enum):
    PLAIN = "plain"
    AWAITING_INPUT_FILE = "awaiting_input_file"
    AWAITING_OUTPUT_FILE = "awaiting_output_file"
    IN_PIPE = "in_pipe"


class OutputMode(Enum):
    TRUNCATE = OUTPUT_REDIRECT
    APPEND = APPEND_REDIRECT

    @property
    def flags(self) -> int:
        extra = os.O_APPEND if self is OutputMode.APPEND else os.O_TRUNC
        return os.O_WRONLY | os.O_CREAT | extra


@dataclass(frozen=True)
class InputRedirect:
    path: str


@dataclass(frozen=True)
class OutputRedirect:
    path: str
    mode: OutputMode = OutputMode.TRUNCATE

    @property
    def append(self) -> bool:
        return self.mode is OutputMode.APPEND


@dataclass(frozen=True)
class PipelineStage:
    """One command of a pipeline and the files wired to its standard streams."""

    argv: tuple[str, ...]
    stdin: InputRedirect | None = None
    stdout: OutputRedirect | None = None

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass
class Pipeline:
    """Ordered stages plus output files that are created but never written."""

    stages: list[PipelineStage]
    discarded_outputs: list[OutputRedirect] = field(default_factory=list)

    def __post_init__(self) -> None:
        last = len(self.stages) - 1
        for idx, stage in enumerate(self.stages):
            if not stage.argv:
                raise ValueError("Pipeline stage without a program")
            if stage.stdin is not None and idx != 0:
                raise ValueError("Only the first stage may read from a file")
            if stage.stdout is not None and idx != last:
                raise ValueError("Only the last stage may write to a file")

    @property
    def is_empty(self) -> bool:
        return not self.stages

    @property
    def stdin(self) -> InputRedirect | None:
        return self.stages[0].stdin if self.stages else None

    @property
    def stdout(self) -> OutputRedirect | None:
        return self.stages[-1].stdout if self.stages else None


class PipelineParser:
    """Builds a :class:`Pipeline` one token at a time.

    The parser never touches the filesystem and never spawns anything; a
    grammar violation raises :class:`ParseError` and the partial plan is
    discarded. ``feed``/``finish`` can be driven directly, ``parse`` runs a
    whole token sequence.
    """

    def __init__(self, *, max_args: int = DEFAULT_MAX_ARGS) -> None:
        self.max_args = max_args
        self.reset()

    def reset(self) -> None:
        self.state = ParserState.PLAIN
        self._mode = OutputMode.TRUNCATE
        self._words: list[str] = []
        self._command: tuple[str, ...] = ()
        self._input: InputRedirect | None = None
        self._output_after_pipe = False
        self._stages: list[PipelineStage] = []
        self._discarded: list[OutputRedirect] = []

    def parse(self, tokens: Iterable[str]) -> Pipeline:
        self.reset()
        for token in tokens:
            self.feed(token)
        return self.finish()

    def feed(self, token: str) -> None:
        if token == INPUT_REDIRECT:
            self._on_input()
        elif token in (OUTPUT_REDIRECT, APPEND_REDIRECT):
            self._on_output(OutputMode(token))
        elif token == PIPE:
            self._on_pipe()
        else:
            self._push(token)

    def finish(self) -> Pipeline:
        state = self.state
        if state is ParserState.PLAIN:
            if self._words:
                self._stages.append(PipelineStage(self._take_program("Missing program")))
        elif state is ParserState.AWAITING_INPUT_FILE:
            path = self._take_file("No file for input redirection")
            self._stages.append(PipelineStage(self._command, stdin=InputRedirect(path)))
        elif state is ParserState.AWAITING_OUTPUT_FILE:
            output = OutputRedirect(self._take_file("No file for output redirection"), self._mode)
            stdin = None if self._output_after_pipe else self._input
            self._stages.append(PipelineStage(self._command, stdin=stdin, stdout=output))
        else:
            self._stages.append(PipelineStage(self._take_program("Missing program to pipe to")))
        pipeline = Pipeline(stages=self._stages, discarded_outputs=self._discarded)
        logger.debug("parsed pipeline: %r", pipeline)
        self.reset()
        return pipeline

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _push(self, word: str) -> None:
        if len(self._words) >= self.max_args:
            raise ParseError(f"Too many args (at most {self.max_args} per command)")
        self._words.append(word)

    def _on_input(self) -> None:
        if self.state is ParserState.AWAITING_INPUT_FILE:
            raise ParseError("Cannot redirect input twice")
        if self.state is ParserState.IN_PIPE:
            raise ParseError("Input redirection must come before the first pipe")
        if self.state is ParserState.AWAITING_OUTPUT_FILE:
            raise ParseError("Input redirection must come before output redirection")
        self._command = self._take_program("Missing program for input redirection")
        self.state = ParserState.AWAITING_INPUT_FILE

    def _on_output(self, mode: OutputMode) -> None:
        if self.state is ParserState.AWAITING_INPUT_FILE:
            self._input = InputRedirect(self._take_file("No file for input redirection"))
        elif self.state is ParserState.AWAITING_OUTPUT_FILE:
            path = self._take_file("No file for output redirection")
            self._discarded.append(OutputRedirect(path, self._mode))
        elif self.state is ParserState.IN_PIPE:
            self._output_after_pipe = True
            self._command = self._take_program("Missing program to pipe to")
        else:
            self._command = self._take_program("Missing program for output redirection")
        self._mode = mode
        self.state = ParserState.AWAITING_OUTPUT_FILE

    def _on_pipe(self) -> None:
        if self.state is ParserState.AWAITING_OUTPUT_FILE:
            raise ParseError("Cannot pipe after output redirection")
        if self.state is ParserState.IN_PIPE:
            stage = PipelineStage(self._take_program("Missing program to pipe to"))
        elif self.state is ParserState.AWAITING_INPUT_FILE:
            path = self._take_file("No file for input redirection")
            stage = PipelineStage(self._command, stdin=InputRedirect(path))
        else:
            stage = PipelineStage(self._take_program("Missing program before pipe"))
        self._stages.append(stage)
        self.state = ParserState.IN_PIPE

    def _take_program(self, message: str) -> tuple[str, ...]:
        if not self._words:
            raise ParseError(message)
        argv = tuple(self._words)
        self._words.clear()
        return argv

    def _take_file(self, message: str) -> str:
        if not self._words:
            raise ParseError(message)
        if len(self._words) > 1:
            raise ParseError(
                f"Unexpected argument {self._words[1]!r} after redirection file {self._words[0]!r}"
            )
        return self._words.pop()


def parse_pipeline(command_line: str, *, max_args: int = DEFAULT_MAX_ARGS) -> Pipeline:
    tokens = tokenize(command_line)
    logger.debug("tokens: %s", tokens)
    return PipelineParser(max_args=max_args).parse(tokens)


__all__ = [
    "InputRedirect",
    "OutputMode",
    "OutputRedirect",
    "ParserState",
    "Pipeline",
    "PipelineParser",
    "PipelineStage",
    "parse_pipeline",
]
