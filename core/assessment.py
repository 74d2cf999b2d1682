"""
assessment.py

Two kinds of assessment:

1. Math Facts placement: start at the learner's grade, ask a short set of
   questions, and step down one grade at a time until a set is answered
   perfectly (or K is reached).
2. Math Rush operator assessment: a mixed set covering the whole curriculum.
   Fact families answered without a single miss are marked complete, and
   mastery is decided by progression completeness alone.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from core.grade_levels import Grade, clamp_grade, grade_to_string, next_grade_level, normalize_grade
from core.progression import (
    get_auto_skip_types,
    get_progression_for_operator,
    is_progression_complete,
    merge_completed_types,
)
from core.rules import MATH_FACTS_CONFIG, MATH_RUSH_RULES
from generators.math_facts import generate_math_fact
from generators.math_rush import generate_rush_question
from generators.question import Question
from validators.answer_validator import AnswerValidator

logger = logging.getLogger(__name__)

AnswerCallback = Callable[[List[Question]], Sequence[str]]


@dataclass
class PlacementResult:
    final_grade_level: str
    questions_answered: int
    total_correct: int
    passed: bool
    tokens_earned: int
    grades_tried: List[str] = field(default_factory=list)


@dataclass
class RushAssessmentResult:
    operator: str
    completed_types: List[str]
    mastered_types: List[str]
    target_types: List[str]
    mastery: bool
    tokens_earned: int


# ------------------------------------------------------------------------- #
# Math Facts placement
# ------------------------------------------------------------------------- #

def generate_assessment_questions(
    operation: str,
    grade: Grade,
    rng: random.Random,
    count: Optional[int] = None,
) -> List[Question]:
    count = count or MATH_FACTS_CONFIG["assessment_questions_per_grade"]
    numeric = normalize_grade(grade)
    return [generate_math_fact(operation, numeric, rng) for _ in range(count)]


def run_placement_assessment(
    operation: str,
    user_grade: Grade,
    answer_fn: AnswerCallback,
    rng: Optional[random.Random] = None,
    validator: Optional[AnswerValidator] = None,
) -> PlacementResult:
    """
    `answer_fn` receives each grade's question list and returns the learner's
    answers in the same order.
    """

    rng = rng or random.Random()
    validator = validator or AnswerValidator()

    current = grade_to_string(clamp_grade(user_grade))
    answered = 0
    total_correct = 0
    passed = False
    tried: List[str] = []

    while True:
        tried.append(current)
        questions = generate_assessment_questions(operation, current, rng)
        answers = list(answer_fn(questions))

        correct = sum(
            1
            for i, question in enumerate(questions)
            if i < len(answers) and validator.is_correct(question, answers[i])
        )
        answered += len(questions)
        total_correct += correct

        if correct == len(questions):
            passed = True
            break

        lower = next_grade_level(current, "down")
        if lower == current:
            break
        current = lower

    logger.info(
        "Placement for %s finished at grade %s (%d/%d correct, passed=%s)",
        operation,
        current,
        total_correct,
        answered,
        passed,
    )
    return PlacementResult(
        final_grade_level=current,
        questions_answered=answered,
        total_correct=total_correct,
        passed=passed,
        tokens_earned=MATH_FACTS_CONFIG["assessment_completion_tokens"],
        grades_tried=tried,
    )


# ------------------------------------------------------------------------- #
# Math Rush operator assessment
# ------------------------------------------------------------------------- #

def generate_rush_assessment(
    operator: str,
    rng: random.Random,
    count: Optional[int] = None,
) -> List[Question]:
    """Cycles through every step of the curriculum so each family is sampled."""

    count = count or MATH_RUSH_RULES["assessment_question_count"]
    steps = get_progression_for_operator(operator)
    return [generate_rush_question(operator, rng, steps[i % len(steps)]) for i in range(count)]


def complete_rush_assessment(
    operator: str,
    grade: Optional[Grade],
    answers: Iterable[Mapping[str, object]],
    existing_types: Iterable[str] = (),
) -> RushAssessmentResult:
    """
    `answers` are `{"type": step name, "is_correct": bool}` records.

    A type counts as mastered only if it was answered correctly at least once
    and never answered incorrectly. Mastery of the operator is then the
    ordinary progression check; the raw score plays no part.
    """

    progression = set(get_progression_for_operator(operator))
    correct_types: List[str] = []
    incorrect_types: List[str] = []

    for answer in answers:
        step = answer.get("type")
        if step not in progression:
            continue
        bucket = correct_types if answer.get("is_correct") else incorrect_types
        if step not in bucket:
            bucket.append(step)

    mastered = [step for step in correct_types if step not in incorrect_types]

    completed = merge_completed_types(get_auto_skip_types(operator, grade), existing_types)
    completed = merge_completed_types(completed, mastered)
    mastery = is_progression_complete(operator, completed, grade)
    tokens = MATH_RUSH_RULES["assessment_mastery_tokens"] if mastery else 0

    logger.info(
        "Rush assessment %s grade=%s: %d type(s) mastered, %d to target, mastery=%s",
        operator,
        grade,
        len(mastered),
        len(incorrect_types),
        mastery,
    )
    return RushAssessmentResult(
        operator=operator,
        completed_types=completed,
        mastered_types=mastered,
        target_types=incorrect_types,
        mastery=mastery,
        tokens_earned=tokens,
    )


def summarize_answers(answers: Iterable[Mapping[str, object]]) -> Dict[str, int]:
    records = list(answers)
    correct = sum(1 for a in records if a.get("is_correct"))
    return {"correct": correct, "total": len(records)}
