"""
Table Rendering Errors

Formula failures travel in-band as cell strings carrying a reserved prefix,
so a failing cell still occupies its grid position and renders like any
other content. Exceptions are reserved for collaborators and input handling.
"""
from __future__ import annotations

from enum import Enum

ERROR_PREFIX = "!ERROR!"


class FailureKind(str, Enum):
    """Kinds of formula failure and their marker text."""
    TOO_MANY_EQUALS = 'Too many "="'
    ADJACENT_REFERENCES = "Two cell references next to each other"
    CIRCULAR_REFERENCE = "Circle Reference"
    NON_EXISTENT_CELL = "Non-Existing Cell"
    MAX_DEPTH_EXCEEDED = "Maximum reference depth exceeded"
    EXPRESSION_EVALUATION_FAILED = "Expression evaluation failed"


def failure(kind: FailureKind, reason: str | None = None) -> str:
    """
    Build the in-band marker for a failed cell.

    Evaluator failures carry the evaluator's own reason instead of the
    generic kind text.
    """
    return f"{ERROR_PREFIX} {reason or kind.value}"


def is_failure(content: str) -> bool:
    return ERROR_PREFIX in content


class ExpressionError(Exception):
    """Raised by the expression evaluator when an expression cannot be computed."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TableInputError(Exception):
    """Raised when an input document cannot be turned into a render request."""
    pass
