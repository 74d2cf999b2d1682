"""
level_tracker.py

Streak-based grade movement for Math Facts. Every finished session either
passes or fails; four consecutive passes move the learner up a grade, four
consecutive fails move them down. Progression mastery (see progression.py)
is tracked separately and never changes here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.grade_levels import Grade, grade_to_string, next_grade_level, normalize_grade
from core.rules import MATH_FACTS_CONFIG


@dataclass
class GradeLevelChange:
    attempt_good: int
    attempt_bad: int
    direction: str | None = None  # "up", "down" or None


@dataclass
class LevelTracker:
    """
    Holds the running streak for one learner and one operation.

    `recent_results` is informational only; the streak counters drive the
    actual movement.
    """

    grade_level: str = "K"
    attempt_good: int = 0
    attempt_bad: int = 0
    recent_results: List[bool] = field(default_factory=list)

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #

    def record_session(self, passed: bool) -> GradeLevelChange:
        change = determine_grade_level_change(self.attempt_good, self.attempt_bad, passed)
        self.attempt_good = change.attempt_good
        self.attempt_bad = change.attempt_bad
        self.recent_results.append(passed)

        if change.direction is not None:
            self.grade_level = next_grade_level(self.grade_level, change.direction)
        return change

    @property
    def numeric_grade(self) -> int:
        return normalize_grade(self.grade_level)

    def trend(self, window: int = 5) -> int:
        """+1 if the recent sessions mostly passed, -1 if mostly failed, else 0."""

        if not self.recent_results:
            return 0

        score = sum(1 if r else -1 for r in self.recent_results[-window:])
        if score > 0:
            return 1
        if score < 0:
            return -1
        return 0


def determine_grade_level_change(
    attempt_good: int,
    attempt_bad: int,
    passed: bool,
    threshold: int | None = None,
) -> GradeLevelChange:
    """
    A pass bumps the good streak and clears the bad one; a fail does the
    reverse. Hitting the threshold moves the grade and clears both counters.
    """

    threshold = threshold or MATH_FACTS_CONFIG["attempts_to_level_change"]

    if passed:
        good, bad = attempt_good + 1, 0
        if good >= threshold:
            return GradeLevelChange(attempt_good=0, attempt_bad=0, direction="up")
        return GradeLevelChange(attempt_good=good, attempt_bad=bad)

    good, bad = 0, attempt_bad + 1
    if bad >= threshold:
        return GradeLevelChange(attempt_good=0, attempt_bad=0, direction="down")
    return GradeLevelChange(attempt_good=good, attempt_bad=bad)


def apply_grade_level_change(grade: Grade, change: GradeLevelChange) -> str:
    """Grade string after applying `change` (unchanged if no direction)."""

    if change.direction is None:
        return grade_to_string(normalize_grade(grade))
    return next_grade_level(grade, change.direction)
