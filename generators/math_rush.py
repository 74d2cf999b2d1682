"""
math_rush.py

Timed fact drills. Each question comes from one fact family, the pattern
behind a progression step ("Adding 7", "Make 10", "Divide by 4"...). Without a
step, a family is picked at random from the operator's curriculum. `mixed`
mode rotates through the four operators; given a step it uses the operator
that owns that step.
"""

from __future__ import annotations

import random
from typing import List, Optional

from core.errors import RuleConfigurationError, UnknownSkillError
from core.rules import FACT_FAMILIES, MATH_RUSH_RULES, OPERATORS, PROGRESSIONS
from generators.math_facts import SYMBOLS
from generators.question import Question, make_question_id

MODULE = "math_rush"


def _operands_for_family(family: dict, rng: random.Random):
    pattern = family["pattern"]

    if pattern == "fixed":
        fixed = rng.choice(family["fixed"])
        other = rng.randint(*family["other"])
        return (fixed, other) if rng.random() < 0.5 else (other, fixed)
    if pattern == "pair":
        return rng.randint(*family["first"]), rng.randint(*family["second"])
    if pattern == "double":
        n = rng.randint(*family["range"])
        return n, n
    if pattern == "make_ten":
        total = family["total"]
        a = rng.randint(0, total)
        return a, total - a
    if pattern == "minuend":
        minuend = rng.choice(family["minuend"])
        return minuend, rng.randint(0, minuend)
    if pattern == "half_double":
        n = rng.randint(*family["range"])
        return n * 2, n
    if pattern == "teen":
        minuend = rng.randint(*family["minuend"])
        return minuend, rng.randint(minuend - 9, 9)
    if pattern == "divisor":
        divisor = rng.choice(family["divisor"])
        quotient = rng.randint(*family["quotient"])
        return divisor * quotient, divisor

    raise RuleConfigurationError(f"Unknown fact-family pattern: {pattern}")


def _answer(operator: str, a: int, b: int) -> int:
    if operator == "addition":
        return a + b
    if operator == "subtraction":
        return a - b
    if operator == "multiplication":
        return a * b
    return a // b


def generate_rush_question(
    operator: str,
    rng: random.Random,
    step: Optional[str] = None,
) -> Question:
    if operator == "mixed":
        # only operators whose curriculum has the step
        owners = [op for op in OPERATORS if step is None or step in FACT_FAMILIES[op]]
        if not owners:
            raise UnknownSkillError(MODULE, f"mixed/{step}")
        operator = rng.choice(owners)
    if operator not in FACT_FAMILIES:
        raise UnknownSkillError(MODULE, operator)

    if step is None:
        step = rng.choice(PROGRESSIONS[operator])
    family = FACT_FAMILIES[operator].get(step)
    if family is None:
        raise UnknownSkillError(MODULE, f"{operator}/{step}")

    a, b = _operands_for_family(family, rng)
    answer = _answer(operator, a, b)

    return Question(
        id=make_question_id(MODULE, operator, a, b),
        module=MODULE,
        skill=operator,
        level=0,
        prompt=f"{a} {SYMBOLS[operator]} {b} = ?",
        correct_answer=str(answer),
        answer_kind="numeric",
        payload={"num1": a, "num2": b, "operation": operator, "type": step},
    )


def generate_rush_set(
    mode: str,
    rng: random.Random,
    step: Optional[str] = None,
    count: Optional[int] = None,
) -> List[Question]:
    """A full rush set; `mixed` cycles addition, subtraction, multiplication, division."""

    count = count or MATH_RUSH_RULES["question_count"]
    questions: List[Question] = []
    for index in range(count):
        operator = OPERATORS[index % len(OPERATORS)] if mode == "mixed" else mode
        questions.append(
            generate_rush_question(operator, rng, step if mode != "mixed" else None)
        )
    return questions


def generate(skill: str, level: int, rng: random.Random, step: Optional[str] = None) -> Question:
    return generate_rush_question(skill, rng, step)
