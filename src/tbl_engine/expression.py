"""
Arithmetic Expression Evaluator

Default evaluator for the residual arithmetic left after cell references
have been substituted. Recursive descent, no eval().

Supports numbers, + - * / % ^, unary signs, parentheses, the constants
pi and e, and a small set of (case-insensitive) numeric functions. Variadic
functions take the comma lists produced by range expansion.
"""
from __future__ import annotations

import math
import re
from typing import Callable, Optional

from tbl_engine.errors import ExpressionError

# unary signs and parenthesis or call levels, each costing a few parser frames
MAX_NESTING = 100

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z_0-9]*)"
    r"|(?P<op>[-+*/%^(),])"
    r")"
)

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}


def _average(*args: float) -> float:
    return sum(args) / len(args)


def _round(value: float, digits: float = 0) -> float:
    return round(value, int(digits))


# name -> (function, min args, max args); max None means variadic
FUNCTIONS: dict[str, tuple[Callable[..., float], int, Optional[int]]] = {
    "sum": (lambda *args: math.fsum(args), 1, None),
    "average": (_average, 1, None),
    "mean": (_average, 1, None),
    "min": (min, 1, None),
    "max": (max, 1, None),
    "count": (lambda *args: float(len(args)), 1, None),
    "product": (lambda *args: math.prod(args), 1, None),
    "abs": (abs, 1, 1),
    "sqrt": (math.sqrt, 1, 1),
    "round": (_round, 1, 2),
    "floor": (math.floor, 1, 1),
    "ceil": (math.ceil, 1, 1),
    "exp": (math.exp, 1, 1),
    "ln": (math.log, 1, 1),
    "log": (math.log, 1, 2),
    "log10": (math.log10, 1, 1),
    "sin": (math.sin, 1, 1),
    "cos": (math.cos, 1, 1),
    "tan": (math.tan, 1, 1),
    "asin": (math.asin, 1, 1),
    "acos": (math.acos, 1, 1),
    "atan": (math.atan, 1, 1),
}


def format_number(value: float) -> str:
    """Format a numeric result as cell text (integral values without a point)."""
    if math.isnan(value) or math.isinf(value):
        raise ExpressionError("result is not a finite number")
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return f"{value:.14g}"


def tokenize(expression: str) -> list[tuple[str, str]]:
    """Split an expression into ``(kind, text)`` tokens."""
    tokens: list[tuple[str, str]] = []
    pos = 0
    length = len(expression)
    while pos < length:
        if expression[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(expression, pos)
        if not match or match.end() == pos:
            raise ExpressionError(f"unexpected character '{expression[pos]}'")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive descent over a token list, computing as it goes."""
    __slots__ = ("tokens", "pos", "depth")

    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][1]
        return None

    def _next(self) -> tuple[str, str]:
        if self.pos >= len(self.tokens):
            raise ExpressionError("unexpected end of expression")
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _expect(self, text: str) -> None:
        kind, value = self._next()
        if value != text:
            raise ExpressionError(f"expected '{text}', got '{value}'")

    def parse(self) -> float:
        if not self.tokens:
            raise ExpressionError("empty expression")
        value = self._expr()
        if self.pos != len(self.tokens):
            raise ExpressionError(f"unexpected operator '{self.tokens[self.pos][1]}'")
        return value

    def _expr(self) -> float:
        left = self._term()
        while self._peek() in ("+", "-"):
            op = self._next()[1]
            right = self._term()
            left = left + right if op == "+" else left - right
        return left

    def _term(self) -> float:
        left = self._unary()
        while self._peek() in ("*", "/", "%"):
            op = self._next()[1]
            right = self._unary()
            if op == "*":
                left *= right
            elif right == 0:
                raise ExpressionError("division by zero")
            elif op == "/":
                left /= right
            else:
                left = math.fmod(left, right)
        return left

    def _unary(self) -> float:
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise ExpressionError("expression too deeply nested")
        try:
            if self._peek() == "-":
                self._next()
                return -self._unary()
            if self._peek() == "+":
                self._next()
                return self._unary()
            return self._power()
        finally:
            self.depth -= 1

    def _power(self) -> float:
        base = self._primary()
        if self._peek() == "^":
            self._next()
            exponent = self._unary()
            try:
                return math.pow(base, exponent)
            except (OverflowError, ValueError) as e:
                raise ExpressionError(f"invalid power: {e}") from e
        return base

    def _primary(self) -> float:
        kind, value = self._next()
        if kind == "number":
            return float(value)
        if kind == "name":
            name = value.lower()
            if self._peek() == "(":
                return self._call(name)
            if name in CONSTANTS:
                return CONSTANTS[name]
            raise ExpressionError(f"undefined variable '{value}'")
        if value == "(":
            inner = self._expr()
            self._expect(")")
            return inner
        raise ExpressionError(f"unexpected operator '{value}'")

    def _call(self, name: str) -> float:
        if name not in FUNCTIONS:
            raise ExpressionError(f"undefined function '{name}'")
        func, min_args, max_args = FUNCTIONS[name]
        self._expect("(")
        args: list[float] = []
        if self._peek() != ")":
            args.append(self._expr())
            while self._peek() == ",":
                self._next()
                args.append(self._expr())
        self._expect(")")
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            raise ExpressionError(f"wrong number of arguments for '{name}'")
        try:
            return float(func(*args))
        except (ValueError, OverflowError, ZeroDivisionError) as e:
            raise ExpressionError(f"{name}: {e}") from e


class ExpressionEvaluator:
    """
    Evaluate an arithmetic string that contains no cell references.

    Any object with an ``evaluate(expression) -> str`` method raising
    ExpressionError on failure can stand in for this class.
    """

    def evaluate(self, expression: str) -> str:
        value = _Parser(tokenize(expression)).parse()
        return format_number(value)
