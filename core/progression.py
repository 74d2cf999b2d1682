"""
progression.py

Mastery evaluation for the Math Rush fact-family curricula.

Each operator has an ordered list of progression steps (see `core.rules`).
Some steps stop being required once a learner reaches a given grade. Mastery
means every step still required for the learner's grade appears in the
learner's completed types. Session scores never enter the decision.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from core.errors import UnknownOperatorError
from core.grade_levels import Grade, normalize_grade
from core.rules import AUTO_SKIP_DEFAULT_GRADE, AUTO_SKIP_RULES, PROGRESSIONS

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------- #
# Public API
# ------------------------------------------------------------------------- #

def get_progression_for_operator(operator: str) -> List[str]:
    """Returns the ordered step names for an operator."""

    try:
        return list(PROGRESSIONS[operator])
    except KeyError:
        raise UnknownOperatorError(operator) from None


def get_step_number(operator: str, step: str) -> int:
    """1-based position of `step` in the operator's curriculum, 0 if absent."""

    progression = get_progression_for_operator(operator)
    if step not in progression:
        return 0
    return progression.index(step) + 1


def get_auto_skip_types(operator: str, grade: Optional[Grade]) -> List[str]:
    """
    Steps the learner does not need for mastery at this grade.

    Grades that cannot be read are treated as grade 3, which skips nothing.
    """

    if operator not in AUTO_SKIP_RULES:
        raise UnknownOperatorError(operator)

    numeric = normalize_grade(grade, default=AUTO_SKIP_DEFAULT_GRADE)
    return [step for step, skip_from in AUTO_SKIP_RULES[operator] if numeric >= skip_from]


def required_steps(operator: str, grade: Optional[Grade]) -> List[str]:
    skipped = set(get_auto_skip_types(operator, grade))
    return [step for step in get_progression_for_operator(operator) if step not in skipped]


def is_progression_complete(
    operator: str,
    completed_types: Iterable[str],
    grade: Optional[Grade],
) -> bool:
    """
    True iff every step required at `grade` is in `completed_types`.

    Empty completion always returns False; no operator has an empty
    curriculum.
    """

    completed = set(completed_types or ())
    if not completed:
        return False

    missing = [step for step in required_steps(operator, grade) if step not in completed]
    if missing:
        logger.debug(
            "%s not mastered at grade %s: %d step(s) missing, next '%s'",
            operator,
            grade,
            len(missing),
            missing[0],
        )
        return False
    return True


def current_progression_step(
    operator: str,
    completed_types: Iterable[str],
    grade: Optional[Grade],
) -> int:
    """
    Index (0-based, in the full curriculum) of the first required step the
    learner has not completed. Returns len(progression) when everything
    required is done.
    """

    progression = get_progression_for_operator(operator)
    completed = set(completed_types or ())
    skipped = set(get_auto_skip_types(operator, grade))

    for index, step in enumerate(progression):
        if step in skipped:
            continue
        if step not in completed:
            return index
    return len(progression)


def next_progression_type(
    operator: str,
    completed_types: Iterable[str],
    grade: Optional[Grade],
) -> Optional[str]:
    progression = get_progression_for_operator(operator)
    index = current_progression_step(operator, completed_types, grade)
    if index >= len(progression):
        return None
    return progression[index]


def merge_completed_types(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    """Order-preserving union: existing entries first, then new ones."""

    merged: List[str] = []
    for step in list(existing or ()) + list(new or ()):
        if step not in merged:
            merged.append(step)
    return merged


def progression_summary(
    operator: str,
    completed_types: Iterable[str],
    grade: Optional[Grade],
) -> Dict[str, object]:
    """
    Snapshot used by the progression endpoint and recommendations:
    {
        "operator": ...,
        "progression": [...],
        "completed_types": [...],
        "skipped_types": [...],
        "current_step": int,
        "next_type": str | None,
        "steps_required": int,
        "steps_completed": int,
        "mastered": bool,
    }
    """

    completed = merge_completed_types([], completed_types)
    required = required_steps(operator, grade)
    done = [step for step in required if step in completed]

    return {
        "operator": operator,
        "progression": get_progression_for_operator(operator),
        "completed_types": completed,
        "skipped_types": get_auto_skip_types(operator, grade),
        "current_step": current_progression_step(operator, completed, grade),
        "next_type": next_progression_type(operator, completed, grade),
        "steps_required": len(required),
        "steps_completed": len(done),
        "mastered": is_progression_complete(operator, completed, grade),
    }


if __name__ == "__main__":
    print(progression_summary("multiplication", ["Multiply by 3", "Multiply by 4"], "6"))
