"""pipeshell package: a small command shell with pipes and file redirection."""

from .config import ShellConfig
from .exceptions import FatalShellError, ParseError, RedirectionError, ShellError
from .executor import PipelineExecutor, PipelineRun
from .shell import CommandResult, Shell
from .shell_parser import (
    InputRedirect,
    OutputMode,
    OutputRedirect,
    Pipeline,
    PipelineParser,
    PipelineStage,
    parse_pipeline,
)
from .tokenizer import tokenize

__all__ = [
    "Shell",
    "ShellConfig",
    "CommandResult",
    "PipelineParser",
    "PipelineExecutor",
    "PipelineRun",
    "Pipeline",
    "PipelineStage",
    "InputRedirect",
    "OutputRedirect",
    "OutputMode",
    "parse_pipeline",
    "tokenize",
    "ShellError",
    "ParseError",
    "RedirectionError",
    "FatalShellError",
]
