"""Whitespace tokenizer for command lines."""

from __future__ import annotations

INPUT_REDIRECT = "<"
OUTPUT_REDIRECT = ">"
APPEND_REDIRECT = ">>"
PIPE = "|"

OPERATORS = frozenset({INPUT_REDIRECT, OUTPUT_REDIRECT, APPEND_REDIRECT, PIPE})


def tokenize(line: str) -> list[str]:
    """Split ``line`` into maximal runs of non-whitespace characters.

    Operators are only recognised as whole tokens, so ``a>b`` is a single
    word. No quoting or escaping is interpreted.
    """

    return line.split()


def is_operator(token: str) -> bool:
    return token in OPERATORS


__all__ = [
    "APPEND_REDIRECT",
    "INPUT_REDIRECT",
    "OPERATORS",
    "OUTPUT_REDIRECT",
    "PIPE",
    "is_operator",
    "tokenize",
]
