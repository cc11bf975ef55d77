"""
Grid Addressing

Conversion between spreadsheet column letters and 1-based column numbers.
"""
from __future__ import annotations

import re

CELL_NAME_RE = re.compile(r"^([A-Za-z]+)(\d+)$")


def letter_to_number(letters: str) -> int:
    """
    Decode column letters in bijective base 26 (A=1, Z=26, AA=27).

    Raises:
        ValueError: If the string is empty or holds anything but ASCII letters
    """
    if not letters or not letters.isascii() or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    number = 0
    for char in letters.upper():
        number = number * 26 + (ord(char) - 64)
    return number


def number_to_letter(number: int) -> str:
    """Encode a 1-based column number as column letters."""
    if number < 1:
        raise ValueError("Column number must be >= 1")
    letters: list[str] = []
    value = number
    while value > 0:
        value, rem = divmod(value - 1, 26)
        letters.append(chr(65 + rem))
    return "".join(reversed(letters))


def cell_name(row: int, column: int) -> str:
    """Build a cell name like ``B3`` from 1-based row and column numbers."""
    if row < 1:
        raise ValueError("Row number must be >= 1")
    return f"{number_to_letter(column)}{row}"


def parse_cell_name(name: str) -> tuple[int, int]:
    """Split a cell name like ``b3`` into 1-based ``(row, column)``."""
    match = CELL_NAME_RE.match(name.strip())
    if not match:
        raise ValueError(f"Invalid cell name: {name!r}")
    return int(match.group(2)), letter_to_number(match.group(1))
