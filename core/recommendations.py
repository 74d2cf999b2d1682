"""
recommendations.py

What to practise next. Weak modules (accuracy under 70%) come first; a learner
doing well everywhere gets the grade band's suggested categories instead. The
difficulty level (1-5) is nudged by overall accuracy, and every Math Rush
operator reports its next unfinished fact family.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.grade_levels import normalize_grade
from core.progress_store import UserProgressState, module_key
from core.progression import next_progression_type
from core.rules import OPERATORS

WEAK_ACCURACY = 0.7

# Grade-specific concepts a learner should pick up next.
GRADE_CONCEPTS: Dict[int, List[str]] = {
    0: ["counting"],
    1: ["place value", "measurement"],
    2: ["arrays"],
    3: ["fractions", "time calculation"],
    4: ["decimal values", "area"],
}
UPPER_GRADE_CONCEPTS = ["ratios", "percentages"]


@dataclass
class Recommendation:
    user_id: str
    suggested_categories: List[str]
    weak_modules: List[str]
    concepts_to_learn: List[str]
    difficulty_level: int
    next_rush_steps: Dict[str, Optional[str]] = field(default_factory=dict)
    correct_rate: float = 0.0


def suggested_categories_for_grade(grade: str) -> List[str]:
    numeric = normalize_grade(grade)
    if numeric <= 1:
        return ["addition", "subtraction"]
    if numeric <= 3:
        return ["multiplication", "division"]
    return ["fractions"]


def difficulty_for_accuracy(questions_answered: int, correct_answers: int) -> int:
    level = 1
    if questions_answered > 0:
        rate = correct_answers / questions_answered
        if rate > 0.8:
            level += 1
        elif rate < 0.5:
            level -= 1
    return max(1, min(5, level))


def weak_modules(state: UserProgressState) -> List[str]:
    """Module keys whose accuracy is below WEAK_ACCURACY, weakest first."""

    scored = []
    for key, progress in state.modules.items():
        if progress.total_questions_answered <= 0:
            continue
        accuracy = progress.correct_answers / progress.total_questions_answered
        if accuracy < WEAK_ACCURACY:
            scored.append((accuracy, key))
    return [key for _, key in sorted(scored)]


def build_recommendations(state: UserProgressState) -> Recommendation:
    weak = weak_modules(state)
    suggested = weak or suggested_categories_for_grade(state.grade)

    numeric = normalize_grade(state.grade)
    concepts = GRADE_CONCEPTS.get(numeric, UPPER_GRADE_CONCEPTS)

    next_steps: Dict[str, Optional[str]] = {}
    for operator in OPERATORS:
        progress = state.modules.get(module_key("math_rush", operator))
        completed = progress.completed_types if progress else []
        next_steps[operator] = next_progression_type(operator, completed, state.grade)

    return Recommendation(
        user_id=state.user_id,
        suggested_categories=list(suggested),
        weak_modules=weak,
        concepts_to_learn=list(concepts),
        difficulty_level=difficulty_for_accuracy(state.questions_answered, state.correct_answers),
        next_rush_steps=next_steps,
        correct_rate=state.accuracy,
    )
