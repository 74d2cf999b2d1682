"""
grade_levels.py

Grades arrive as strings ("K", "3", "6") from user records and as integers
from rule tables. Everything in the core works on integers with K = 0; these
helpers convert in both directions and move a grade up or down the K-6 band.
"""

from __future__ import annotations

from typing import Union

Grade = Union[str, int]

MIN_GRADE = 0
MAX_GRADE = 6


def normalize_grade(grade: Grade | None, default: int = 0) -> int:
    """
    Returns the numeric grade with K = 0.

    Unparseable values fall back to `default`. Strings like "Grade 4" are
    accepted by keeping only the digits.
    """

    if grade is None:
        return default
    if isinstance(grade, bool):
        return default
    if isinstance(grade, int):
        return grade

    text = str(grade).strip()
    if text.upper() == "K":
        return 0
    digits = "".join(ch for ch in text if ch.isdigit())
    if not digits:
        return default
    return int(digits)


def grade_to_string(grade: int) -> str:
    return "K" if grade == 0 else str(grade)


def clamp_grade(grade: Grade) -> int:
    return max(MIN_GRADE, min(MAX_GRADE, normalize_grade(grade)))


def next_grade_level(current: Grade, direction: str) -> str:
    """Moves one grade up (capped at 6) or down (floored at K)."""

    normalized = normalize_grade(current)
    if direction == "up":
        moved = min(MAX_GRADE, normalized + 1)
    elif direction == "down":
        moved = max(MIN_GRADE, normalized - 1)
    else:
        raise ValueError(f"Invalid direction: {direction}. Must be 'up' or 'down'.")
    return grade_to_string(moved)
