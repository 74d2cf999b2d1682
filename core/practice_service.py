"""
practice_service.py

Glue between the HTTP layer and the practice core: issues questions, grades
answers against the issued copy, books finished sessions, and runs the
Math Rush assessment. Route handlers stay thin and only translate payloads.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.assessment import complete_rush_assessment
from core.errors import QuestionNotFoundError, UnknownOperatorError, UnknownSkillError
from core.grade_levels import normalize_grade
from core.level_tracker import apply_grade_level_change, determine_grade_level_change
from core.progress_store import InMemoryProgressStore, ModuleProgress, module_key
from core.progression import (
    get_auto_skip_types,
    get_progression_for_operator,
    is_progression_complete,
    merge_completed_types,
    progression_summary,
)
from core.recommendations import Recommendation, build_recommendations
from core.rules import DECIMAL_DEFENDER_RULES, OPERATORS, RATIOS_RULES
from core.scoring import SessionScore, micro_tokens, score_module_session
from generators.question import Question
from generators.question_generator import MODULE_SKILLS, QuestionGenerator
from validators.answer_validator import AnswerValidator, ValidationResult

logger = logging.getLogger(__name__)


def default_level(module: str, grade: str) -> int:
    """Level used when a request does not name one."""

    if module == "math_facts":
        return normalize_grade(grade)
    if module == "ratios":
        return min(RATIOS_RULES["levels"])
    if module == "fractions":
        return 1
    if module == "decimals":
        low, _ = DECIMAL_DEFENDER_RULES["difficulty_range"]
        return low
    return 0


class PracticeService:
    def __init__(
        self,
        store: InMemoryProgressStore,
        generator: Optional[QuestionGenerator] = None,
        validator: Optional[AnswerValidator] = None,
    ):
        self.store = store
        self.generator = generator or QuestionGenerator()
        self.validator = validator or AnswerValidator()
        # user id -> question id -> issued question
        self._issued: Dict[str, Dict[str, Question]] = {}

    # ------------------------------------------------------------------ #
    # Questions
    # ------------------------------------------------------------------ #

    def next_question(
        self,
        user_id: str,
        module: str,
        skill: str,
        level: Optional[int] = None,
        *,
        step: Optional[str] = None,
        exclude: Iterable[str] = (),
        force_dynamic: bool = False,
    ) -> Question:
        state = self.store.get_or_create(user_id)
        if level is None:
            if module == "math_facts":
                level = normalize_grade(self._progress(user_id, module, skill).grade_level)
            else:
                level = default_level(module, state.grade)

        question = self.generator.generate(
            module,
            skill,
            level,
            step=step,
            exclude=exclude,
            force_dynamic=force_dynamic,
        )
        self._issued.setdefault(user_id, {})[question.id] = question
        return question

    def submit_answer(self, user_id: str, question_id: str, answer: Any) -> ValidationResult:
        """Grades against the issued question and consumes it."""

        issued = self._issued.get(user_id, {})
        question = issued.pop(question_id, None)
        if question is None:
            raise QuestionNotFoundError(question_id)

        result = self.validator.validate(question, answer)
        result.details["correct_answer"] = question.correct_answer
        return result

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    def complete_session(
        self,
        user_id: str,
        module: str,
        correct: int,
        total: int,
        duration_sec: float = 0,
        skill: Optional[str] = None,
        step: Optional[str] = None,
    ) -> Dict[str, Any]:
        if module not in MODULE_SKILLS:
            raise UnknownSkillError(module)
        if skill is not None and skill not in MODULE_SKILLS[module]:
            raise UnknownSkillError(module, skill)
        if module == "math_rush" and step and skill in OPERATORS:
            if step not in get_progression_for_operator(skill):
                raise UnknownSkillError(module, f"{skill}/{step}")

        score = score_module_session(module, correct, total, duration_sec)
        state = self.store.get_or_create(user_id)
        progress = self._progress(user_id, module, skill)

        progress.tokens_earned += score.tokens_earned
        progress.total_questions_answered += total
        progress.correct_answers += correct
        progress.sessions_completed += 1
        progress.last_accuracy = score.percentage
        state.questions_answered += total
        state.correct_answers += correct

        result: Dict[str, Any] = {
            "module": module,
            "percentage": score.percentage,
            "passed": score.passed,
            "perfect": score.perfect,
            "tokens_earned": score.tokens_earned,
            "grade_level": None,
            "grade_change": None,
            "completed_types": list(progress.completed_types),
            "mastery": progress.mastery_level,
        }

        if module == "math_facts":
            result.update(self._apply_streak(progress, score))
        elif module == "math_rush" and skill in OPERATORS:
            result.update(self._apply_rush_step(progress, skill, step, score, state.grade))

        self.store.save(state)
        result["tokens"] = self.store.add_tokens(user_id, score.tokens_earned)

        logger.info(
            "User %s finished %s/%s: %d/%d, %d tokens",
            user_id,
            module,
            skill,
            correct,
            total,
            score.tokens_earned,
        )
        return result

    # ------------------------------------------------------------------ #
    # Math Rush
    # ------------------------------------------------------------------ #

    def rush_progression(self, user_id: str, operator: str) -> Dict[str, Any]:
        self._require_operator(operator)
        state = self.store.get_or_create(user_id)
        progress = self._progress(user_id, "math_rush", operator)
        summary = progression_summary(operator, progress.completed_types, state.grade)
        summary["test_taken"] = progress.test_taken
        return summary

    def rush_assessment(
        self,
        user_id: str,
        operator: str,
        answers: List[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        self._require_operator(operator)
        state = self.store.get_or_create(user_id)
        progress = self._progress(user_id, "math_rush", operator)

        outcome = complete_rush_assessment(operator, state.grade, answers, progress.completed_types)
        progress.completed_types = outcome.completed_types
        progress.mastery_level = outcome.mastery
        progress.test_taken = True
        progress.tokens_earned += outcome.tokens_earned
        self.store.save(state)
        tokens = self.store.add_tokens(user_id, outcome.tokens_earned)

        return {
            "operator": operator,
            "completed_types": outcome.completed_types,
            "mastered_types": outcome.mastered_types,
            "target_types": outcome.target_types,
            "mastery": outcome.mastery,
            "tokens_earned": outcome.tokens_earned,
            "tokens": tokens,
        }

    # ------------------------------------------------------------------ #
    # Tokens and recommendations
    # ------------------------------------------------------------------ #

    def add_micro_tokens(
        self,
        user_id: str,
        amount: Optional[int] = None,
        correct: Optional[int] = None,
    ) -> int:
        earned = amount if amount is not None else micro_tokens(correct or 0)
        return self.store.add_tokens(user_id, earned)

    def token_balance(self, user_id: str) -> int:
        return self.store.get_or_create(user_id).tokens

    def recommendations(self, user_id: str) -> Recommendation:
        return build_recommendations(self.store.get_or_create(user_id))

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _progress(self, user_id: str, module: str, skill: Optional[str]) -> ModuleProgress:
        key = module_key(module, skill)
        state = self.store.get_or_create(user_id)
        is_new = key not in state.modules
        progress = self.store.module_progress(user_id, key)
        if is_new and module == "math_rush" and skill in OPERATORS:
            progress.completed_types = get_auto_skip_types(skill, state.grade)
        return progress

    @staticmethod
    def _require_operator(operator: str) -> None:
        if operator not in OPERATORS:
            raise UnknownOperatorError(operator)

    @staticmethod
    def _apply_streak(progress: ModuleProgress, score: SessionScore) -> Dict[str, Any]:
        change = determine_grade_level_change(progress.attempt_good, progress.attempt_bad, score.passed)
        progress.attempt_good = change.attempt_good
        progress.attempt_bad = change.attempt_bad
        progress.grade_level = apply_grade_level_change(progress.grade_level, change)
        return {"grade_level": progress.grade_level, "grade_change": change.direction}

    @staticmethod
    def _apply_rush_step(
        progress: ModuleProgress,
        operator: str,
        step: Optional[str],
        score: SessionScore,
        grade: str,
    ) -> Dict[str, Any]:
        """A passed session on a fact family completes that family."""

        if step and score.passed:
            progress.completed_types = merge_completed_types(progress.completed_types, [step])
        progress.mastery_level = is_progression_complete(operator, progress.completed_types, grade)
        return {"completed_types": list(progress.completed_types), "mastery": progress.mastery_level}
