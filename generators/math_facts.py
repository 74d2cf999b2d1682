"""
math_facts.py

Grade-banded arithmetic facts. The skill is the operation, the level is the
grade (K = 0). Grades above 6 fall back to the table's default row.
"""

from __future__ import annotations

import random

from core.errors import RuleConfigurationError, UnknownSkillError
from core.rules import MATH_FACTS_RANGES
from generators.question import Question, build_options, make_question_id, numeric_distractors

MODULE = "math_facts"

SYMBOLS = {
    "addition": "+",
    "subtraction": "-",
    "multiplication": "×",
    "division": "÷",
}


def _range_row(operation: str, grade: int) -> dict:
    table = MATH_FACTS_RANGES.get(operation)
    if table is None:
        raise UnknownSkillError(MODULE, operation)
    if grade < 0:
        raise RuleConfigurationError(f"No {operation} range for grade {grade}")
    return table.get(grade, table["default"])


def _operands(operation: str, row: dict, rng: random.Random):
    try:
        if operation == "subtraction":
            subtrahend = rng.randint(row["min2"], row["max2"])
            diff = rng.randint(row["min_diff"], row["max_diff"])
            minuend = diff + subtrahend
            return minuend, subtrahend, diff

        if operation == "division":
            divisor = rng.randint(row["min_divisor"], row["max_divisor"])
            quotient = rng.randint(row["min_quotient"], row["max_quotient"])
            return quotient * divisor, divisor, quotient

        a = rng.randint(row["min1"], row["max1"])
        b = rng.randint(row["min2"], row["max2"])
    except (KeyError, ValueError) as exc:
        raise RuleConfigurationError(f"Bad {operation} range row {row}: {exc}") from exc

    if operation == "addition":
        return a, b, a + b
    return a, b, a * b


def generate_math_fact(operation: str, grade: int, rng: random.Random) -> Question:
    row = _range_row(operation, grade)
    first, second, answer = _operands(operation, row, rng)

    correct = str(answer)
    options = build_options(correct, (str(n) for n in numeric_distractors(answer, rng)), rng)

    return Question(
        id=make_question_id(MODULE, operation, first, second),
        module=MODULE,
        skill=operation,
        level=grade,
        prompt=f"{first} {SYMBOLS[operation]} {second} = ?",
        correct_answer=correct,
        options=options,
        answer_kind="numeric",
        payload={"num1": first, "num2": second, "operation": operation},
    )


def generate(skill: str, level: int, rng: random.Random) -> Question:
    return generate_math_fact(skill, level, rng)


if __name__ == "__main__":
    demo_rng = random.Random(7)
    for op in SYMBOLS:
        print(generate_math_fact(op, 3, demo_rng).prompt)
