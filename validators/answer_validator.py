"""
answer_validator.py

Checks a learner's response against an issued Question. Comparison depends on
the question's `answer_kind`:

- text:          trimmed, case-insensitive string equality
- numeric:       value equality with SymPy rationals ("0.50" == "1/2",
                 "2 1/3" == "7/3")
- ratio:         "a to b", "a/b" and "a : b" all normalise to "a:b"
- gcd_simplify:  "gcd,simplified"; the fraction must be in lowest terms
- multi_select:  comma-separated picks (or a list); at least one pick, and
                 every pick must be a correct option

User input is never handed to `sympify`; numbers are matched with a regex
first and turned into `Rational`s directly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Set

from sympy import Rational

from generators.question import Question

_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_FRACTION_RE = re.compile(r"^(-?\d+)\s*/\s*(\d+)$")
_MIXED_RE = re.compile(r"^(-?\d+)\s+(\d+)\s*/\s*(\d+)$")


@dataclass
class ValidationResult:
    """
    Represents the outcome of a single validation attempt.
    """

    correct: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


def normalize_text(value: Any) -> str:
    return str(value).strip().lower()


def normalize_ratio(value: Any) -> str:
    text = normalize_text(value)
    text = re.sub(r"\s+to\s+", ":", text)
    text = re.sub(r"\s*[/:]\s*", ":", text)
    return re.sub(r"\s+", "", text)


def parse_number(value: Any) -> Optional[Rational]:
    """
    Exact value of an integer, decimal, fraction or mixed number, or None
    when the text is none of those.
    """

    text = normalize_text(value)
    if _NUMBER_RE.match(text):
        return Rational(text)

    match = _FRACTION_RE.match(text)
    if match:
        num, den = int(match.group(1)), int(match.group(2))
        return Rational(num, den) if den else None

    match = _MIXED_RE.match(text)
    if match:
        whole, num, den = (int(g) for g in match.groups())
        if not den:
            return None
        sign = -1 if whole < 0 else 1
        return sign * (abs(whole) + Rational(num, den))

    return None


class AnswerValidator:
    """
    Validates learner responses for every question kind.

    Usage:
        validator = AnswerValidator()
        result = validator.validate(question, "3:4")
        if result.correct:
            ...
    """

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def validate(self, question: Question, user_answer: Any) -> ValidationResult:
        if user_answer is None or normalize_text(user_answer) == "":
            return ValidationResult(correct=False, message="No answer given.")

        kind = question.answer_kind
        if kind == "multi_select":
            return self._validate_multi_select(question, user_answer)
        if kind == "numeric":
            return self._validate_numeric(question.correct_answer, user_answer)
        if kind == "ratio":
            return self._compare(
                normalize_ratio(question.correct_answer), normalize_ratio(user_answer)
            )
        if kind == "gcd_simplify":
            return self._validate_gcd_simplify(question, user_answer)
        return self._compare(normalize_text(question.correct_answer), normalize_text(user_answer))

    def is_correct(self, question: Question, user_answer: Any) -> bool:
        return self.validate(question, user_answer).correct

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _compare(expected: str, actual: str) -> ValidationResult:
        details = {"expected": expected, "actual": actual}
        if expected == actual:
            return ValidationResult(correct=True, message="Answers match.", details=details)
        return ValidationResult(correct=False, message="Answers differ.", details=details)

    def _validate_numeric(self, expected: Any, actual: Any) -> ValidationResult:
        expected_value = parse_number(expected)
        actual_value = parse_number(actual)

        if expected_value is None:
            # Non-numeric key (e.g. a ratio on a numeric question): plain text.
            return self._compare(normalize_text(expected), normalize_text(actual))
        if actual_value is None:
            return ValidationResult(
                correct=False,
                message=f"Unable to read '{actual}' as a number.",
                details={"actual": str(actual)},
            )

        details = {"expected_value": str(expected_value), "actual_value": str(actual_value)}
        if expected_value == actual_value:
            return ValidationResult(correct=True, message="Answers are equivalent.", details=details)
        return ValidationResult(correct=False, message="Answers differ.", details=details)

    def _validate_gcd_simplify(self, question: Question, user_answer: Any) -> ValidationResult:
        expected_gcd, expected_fraction = question.correct_answer.split(",", 1)
        parts = [p.strip() for p in str(user_answer).split(",")]
        if len(parts) != 2:
            return ValidationResult(
                correct=False,
                message="Expected 'gcd,simplified fraction'.",
                details={"actual": str(user_answer)},
            )

        gcd_ok = self._validate_numeric(expected_gcd, parts[0]).correct
        fraction_ok = normalize_ratio(expected_fraction) == normalize_ratio(parts[1])
        return ValidationResult(
            correct=gcd_ok and fraction_ok,
            message="Answers match." if gcd_ok and fraction_ok else "One or more parts incorrect.",
            details={"component_results": {"gcd": gcd_ok, "simplified": fraction_ok}},
        )

    def _validate_multi_select(self, question: Question, user_answer: Any) -> ValidationResult:
        if isinstance(user_answer, str):
            picks = user_answer.split(",")
        else:
            picks = list(user_answer)

        selected = self._option_set(picks)
        correct = self._option_set(question.correct_options)
        wrong_picks = sorted(selected - correct)
        missed = sorted(correct - selected)

        details = {"wrong_picks": wrong_picks, "missed": missed}
        if wrong_picks:
            return ValidationResult(correct=False, message="Selected an incorrect option.", details=details)
        if not selected:
            return ValidationResult(correct=False, message="No option selected.", details=details)
        return ValidationResult(correct=True, message="Only correct options selected.", details=details)

    @staticmethod
    def _option_set(items: Iterable[Any]) -> Set[str]:
        return {normalize_ratio(item) for item in items if normalize_text(item)}


def validate(question: Question, user_answer: Any) -> ValidationResult:
    """
    Convenience function for one-off validations.
    """

    return AnswerValidator().validate(question, user_answer)


def is_correct(question: Question, user_answer: Any) -> bool:
    return AnswerValidator().is_correct(question, user_answer)


if __name__ == "__main__":
    from generators.ratios import generate_write_form_question

    demo = generate_write_form_question(3, 4, "to", "colon")
    print(demo.prompt, validate(demo, "3 : 4"))
