"""
Answer text parsing.

Students type answers like "1, -2.5" or "3;4". Whitespace is ignored,
commas and semicolons separate values, and each token contributes the
decimal number it starts with (so "2x" reads as 2). Tokens that do not
start with a number are dropped.
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[,;]")
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def leading_number(token: str) -> float | None:
    """Return the decimal number a token starts with, or None."""
    match = _LEADING_NUMBER.match(token)
    if match is None:
        return None
    return float(match.group(0))


def strip_whitespace(raw: str) -> str:
    return _WHITESPACE.sub("", raw)


def parse_answer(raw: str) -> list[float]:
    """
    Extract candidate values from a free-text answer.

    Args:
        raw: Answer as typed by the student

    Returns:
        Parsed numbers in input order (possibly empty)
    """
    compact = strip_whitespace(raw)
    numbers = []
    for token in _SEPARATORS.split(compact):
        value = leading_number(token)
        if value is not None:
            numbers.append(value)
    return numbers


def has_separator(raw: str) -> bool:
    return _SEPARATORS.search(raw) is not None
