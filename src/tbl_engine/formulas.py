"""
Formula Resolver

Rewrites a cell's formula by substituting resolved cell and range
references, then hands the residual arithmetic to the expression evaluator.

A formula is cell content starting with "=". References are written as
``[B3]`` and ranges as ``[A1:C4]``. Resolved values are written back into
the grid, so the grid itself serves as the evaluation cache.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Protocol, Union

from tbl_engine.addressing import letter_to_number, number_to_letter
from tbl_engine.errors import ExpressionError, FailureKind, failure, is_failure
from tbl_engine.expression import ExpressionEvaluator

logger = logging.getLogger(__name__)

RANGE_RE = re.compile(r"\[([A-Za-z]+)([0-9]+):([A-Za-z]+)([0-9]+)\]")
REFERENCE_RE = re.compile(r"\[([A-Za-z]+)([0-9]+)\]")
_WHITESPACE_RE = re.compile(r"\s")


class Evaluator(Protocol):
    def evaluate(self, expression: str) -> str: ...


def expand_range_token(token: str) -> str:
    """
    Expand a range token into a comma-joined list of single references.

    Columns form the outer loop and rows the inner one, both ascending, so
    ``[A1:B2]`` and ``[B2:A1]`` both give ``[A1],[A2],[B1],[B2]``.
    """
    match = RANGE_RE.fullmatch(token)
    if not match:
        raise ValueError(f"Invalid range token: {token!r}")
    first_col = letter_to_number(match.group(1))
    first_row = int(match.group(2))
    last_col = letter_to_number(match.group(3))
    last_row = int(match.group(4))

    cells = []
    for col in range(min(first_col, last_col), max(first_col, last_col) + 1):
        column = number_to_letter(col)
        for row in range(min(first_row, last_row), max(first_row, last_row) + 1):
            cells.append(f"[{column}{row}]")
    return ",".join(cells)


class _Frame:
    """A formula waiting on the cells it references."""
    __slots__ = ("expression", "matches", "index", "seen", "key", "cell", "pending", "outcome")

    def __init__(self, expression: str, key: Optional[str], cell: Optional[tuple[int, int]]):
        self.expression = expression
        self.matches = list(REFERENCE_RE.finditer(expression))
        self.index = 0
        self.seen: set[str] = set()
        self.key = key  # upper-cased reference token, None for the starting cell
        self.cell = cell  # grid position to write the result to
        self.pending: Optional[str] = None
        self.outcome: Optional[str] = None

    def resume(self, value: str) -> None:
        """Take the value of the referenced cell that was being resolved."""
        if is_failure(value):
            self.outcome = value
        else:
            self.expression = self.expression.replace(self.pending, value)
        self.pending = None


class FormulaResolver:
    """
    Resolve formulas over a mutable grid of cell strings.

    One resolver serves one render: the grid is modified in place and the
    range cache lives as long as the resolver. Reference chains are followed
    with an explicit stack, so their length is bounded by the grid and not
    by the interpreter's recursion limit.
    """

    def __init__(
        self,
        grid: list[list[str]],
        evaluator: Optional[Evaluator] = None,
        max_depth: Optional[int] = None,
    ):
        self.grid = grid
        self.evaluator = evaluator or ExpressionEvaluator()
        self.max_depth = max_depth
        self.known_ranges: dict[str, str] = {}

    @property
    def depth_limit(self) -> int:
        """Longest reference chain followed; without max_depth, the number of cells."""
        if self.max_depth is not None:
            return self.max_depth
        return sum(len(row) for row in self.grid)

    def evaluate_table_data(self) -> list[list[str]]:
        """Resolve every cell in row-major order and return the grid."""
        for row in self.grid:
            for col_idx in range(len(row)):
                row[col_idx] = self.evaluate_cell(row[col_idx])
        return self.grid

    def expand_range(self, token: str) -> str:
        if token in self.known_ranges:
            logger.debug("Range %s served from cache", token)
            return self.known_ranges[token]
        expansion = expand_range_token(token)
        self.known_ranges[token] = expansion
        return expansion

    def evaluate_cell(self, content: str, ancestors: tuple[str, ...] = ()) -> str:
        """
        Parse and evaluate the content of a cell.

        Args:
            content: Raw cell content
            ancestors: Upper-cased reference tokens already being resolved
                by the caller

        Returns:
            The content unchanged for plain text, otherwise the formula
            result or a failure marker
        """
        start = self._open(content, None, None)
        if isinstance(start, str):
            return start

        active = set(ancestors)
        depth_limit = self.depth_limit
        stack = [start]
        while True:
            frame = stack[-1]
            step = self._step(frame, active, depth_limit)
            if isinstance(step, _Frame):
                stack.append(step)
                active.add(step.key)
                continue

            stack.pop()
            self._store(frame, step)
            if not stack:
                return step
            active.discard(frame.key)
            stack[-1].resume(step)

    def _open(self, content: str, key: Optional[str], cell: Optional[tuple[int, int]]) -> Union[_Frame, str]:
        """Check a cell's syntax and expand its ranges; plain text and failures come back as strings."""
        if not content or content[0] != "=":
            return content

        expression = content[1:]

        if "=" in expression:
            return failure(FailureKind.TOO_MANY_EQUALS)
        if "][" in expression:
            return failure(FailureKind.ADJACENT_REFERENCES)

        expression = _WHITESPACE_RE.sub("", expression)

        replaced_ranges: set[str] = set()
        for token in [m.group(0) for m in RANGE_RE.finditer(expression)]:
            if token in replaced_ranges:
                continue
            replaced_ranges.add(token)
            expression = expression.replace(token, self.expand_range(token))

        return _Frame(expression, key, cell)

    def _step(self, frame: _Frame, active: set[str], depth_limit: int) -> Union[_Frame, str]:
        """
        Advance a formula to its next unresolved reference.

        Returns the frame of a referenced formula that must be resolved
        first, or the formula's final value.
        """
        if frame.outcome is not None:
            return frame.outcome

        while frame.index < len(frame.matches):
            match = frame.matches[frame.index]
            frame.index += 1
            token = match.group(0)
            key = token.upper()
            if key in active:
                return failure(FailureKind.CIRCULAR_REFERENCE)
            if token in frame.seen:
                continue
            frame.seen.add(token)

            ref_row = int(match.group(2)) - 1
            ref_col = letter_to_number(match.group(1)) - 1
            if not (0 <= ref_row < len(self.grid) and 0 <= ref_col < len(self.grid[ref_row])):
                return failure(FailureKind.NON_EXISTENT_CELL)

            if len(active) >= depth_limit:
                logger.warning("Reference chain exceeded %d levels at %s", depth_limit, key)
                return failure(FailureKind.MAX_DEPTH_EXCEEDED)

            referenced = self._open(self.grid[ref_row][ref_col], key, (ref_row, ref_col))
            if isinstance(referenced, _Frame):
                frame.pending = token
                return referenced

            self.grid[ref_row][ref_col] = referenced
            if is_failure(referenced):
                return referenced
            frame.expression = frame.expression.replace(token, referenced)

        try:
            return self.evaluator.evaluate(frame.expression)
        except ExpressionError as e:
            logger.debug("Expression %r failed: %s", frame.expression, e.reason)
            return failure(FailureKind.EXPRESSION_EVALUATION_FAILED, e.reason)

    def _store(self, frame: _Frame, value: str) -> None:
        # a depth failure belongs to the chain that was followed, not to the cell
        if frame.cell is None or value == failure(FailureKind.MAX_DEPTH_EXCEEDED):
            return
        row, col = frame.cell
        self.grid[row][col] = value
