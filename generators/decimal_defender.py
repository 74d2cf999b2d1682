"""
decimal_defender.py

Decimal questions: rounding, comparing, addition, subtraction and place
value. Arithmetic uses `Decimal` so answers never pick up float noise, and
rounding is half-up the way it is taught in class.

Difficulty runs 3 to 6 and sets the largest whole part operands use (10, 20,
50, 100). Place-value questions always use a two-digit whole part.
"""

from __future__ import annotations

import random
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from core.errors import RuleConfigurationError, UnknownSkillError
from core.rules import DECIMAL_DEFENDER_RULES
from generators.question import Question, build_options, make_question_id

MODULE = "decimals"

ROUNDING_TARGETS = (
    ("nearest whole number", 0),
    ("nearest tenth", 1),
    ("nearest hundredth", 2),
)

PLACE_NAMES = ("tens", "ones", "tenths", "hundredths", "thousandths")

COMPARISON_OPTIONS = (">", "<", "=", "Cannot determine")


def _random_decimal(rng: random.Random, low: int, high: int, places: int) -> Decimal:
    """Uniform value in [low, high) with exactly `places` decimals."""

    scale = 10 ** places
    return Decimal(rng.randint(low * scale, high * scale - 1)).scaleb(-places)


def _max_whole(level: int) -> int:
    row = DECIMAL_DEFENDER_RULES["levels"].get(level)
    if row is None:
        raise RuleConfigurationError(f"No decimals difficulty {level}")
    return row["max_whole"]


def quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _arith_distractors(answer: Decimal, a: Decimal, b: Decimal, op: str) -> List[str]:
    whole_parts = int(a) + int(b) if op == "+" else int(a) - int(b)
    nearby = [answer + Decimal("0.1"), answer - Decimal("0.1"), answer + 1]
    wrong = [str(quantize(c, 2)) for c in nearby if c >= 0]
    if whole_parts >= 0 and Decimal(whole_parts) != answer:
        # adding only the whole parts
        wrong.append(str(whole_parts))
    return wrong


def _rounding(level: int, rng: random.Random) -> Question:
    description, places = rng.choice(ROUNDING_TARGETS)
    value = _random_decimal(rng, 1, _max_whole(level) * 10, 3)
    rounded = quantize(value, places)
    step = Decimal(1).scaleb(-places)

    answer = str(rounded)
    wrong = [rounded + step, rounded - step, rounded + (1 if places else 2)]
    distractors = [str(quantize(w, places)) for w in wrong if w >= 0]

    return Question(
        id=make_question_id(MODULE, "rounding", value, places),
        module=MODULE,
        skill="rounding",
        level=level,
        prompt=f"Round {value} to the {description}",
        correct_answer=answer,
        options=build_options(answer, distractors, rng),
        answer_kind="numeric",
        payload={"value": str(value), "places": places},
    )


def _comparing(level: int, rng: random.Random) -> Question:
    top = _max_whole(level)
    first = _random_decimal(rng, 1, top, 2)
    second = _random_decimal(rng, 1, top, 2)
    while second == first:
        second = _random_decimal(rng, 1, top, 2)

    answer = ">" if first > second else "<"
    return Question(
        id=make_question_id(MODULE, "comparing", first, second),
        module=MODULE,
        skill="comparing",
        level=level,
        prompt=f"Compare these decimals: {first} _____ {second}",
        correct_answer=answer,
        options=COMPARISON_OPTIONS,
        payload={"first": str(first), "second": str(second)},
    )


def _arithmetic(skill: str, level: int, rng: random.Random) -> Question:
    top = _max_whole(level)
    if skill == "addition":
        a = _random_decimal(rng, 1, top, 2)
        b = _random_decimal(rng, 1, top, 2)
        op, answer_value, verb = "+", a + b, "Add"
    else:
        # b stays below a's floor so the difference is positive
        a = _random_decimal(rng, top // 2, top + 3, 2)
        b = _random_decimal(rng, 1, top // 2 - 1, 2)
        op, answer_value, verb = "-", a - b, "Subtract"

    answer = str(quantize(answer_value, 2))
    return Question(
        id=make_question_id(MODULE, skill, a, b),
        module=MODULE,
        skill=skill,
        level=level,
        prompt=f"{verb} these decimals: {a} {op} {b}",
        correct_answer=answer,
        options=build_options(answer, _arith_distractors(answer_value, a, b, op), rng),
        answer_kind="numeric",
        payload={"a": str(a), "b": str(b), "op": op},
    )


def _place_value(level: int, rng: random.Random) -> Question:
    _max_whole(level)  # rejects unknown difficulties
    whole = rng.randint(10, 99)
    digits = [rng.randint(0, 9) for _ in range(3)]
    value = f"{whole}.{''.join(str(d) for d in digits)}"

    place_digits = [whole // 10, whole % 10] + digits
    index = rng.randrange(len(PLACE_NAMES))
    answer = str(place_digits[index])

    distractors = [str(d) for d in range(10) if str(d) != answer]
    rng.shuffle(distractors)

    return Question(
        id=make_question_id(MODULE, "place_value", value, PLACE_NAMES[index]),
        module=MODULE,
        skill="place_value",
        level=level,
        prompt=f"In the decimal {value}, what digit is in the {PLACE_NAMES[index]} place?",
        correct_answer=answer,
        options=build_options(answer, distractors, rng),
        payload={"value": value, "place": PLACE_NAMES[index]},
    )


def generate(skill: str, level: int, rng: random.Random) -> Question:
    if skill == "rounding":
        return _rounding(level, rng)
    if skill == "comparing":
        return _comparing(level, rng)
    if skill in ("addition", "subtraction"):
        return _arithmetic(skill, level, rng)
    if skill == "place_value":
        return _place_value(level, rng)
    raise UnknownSkillError(MODULE, skill)


def generate_decimal_set(
    rng: random.Random,
    count: Optional[int] = None,
    level: Optional[int] = None,
) -> List[Question]:
    """Cycles through the skills in order, like a Decimal Defender wave."""

    count = count or DECIMAL_DEFENDER_RULES["questions_per_session"]
    skills = DECIMAL_DEFENDER_RULES["skills"]
    if level is None:
        level, _ = DECIMAL_DEFENDER_RULES["difficulty_range"]
    return [generate(skills[i % len(skills)], level, rng) for i in range(count)]
