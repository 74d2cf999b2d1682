"""
fractions_puzzle.py

Fraction questions. A 20-question session climbs five tiers, one every four
questions; tier 5 tightens the denominators again but allows mixed numbers.
Levels here are 1-based tiers.
"""

from __future__ import annotations

import random
from fractions import Fraction
from math import gcd
from typing import List, Optional

from core.errors import RuleConfigurationError, UnknownSkillError
from core.rules import FRACTIONS_RULES
from generators.question import Question, make_question_id, shuffled

MODULE = "fractions"

BAR_COLORS = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#06B6D4",
    "#F97316",
    "#84CC16",
)


def level_for_index(index: int) -> int:
    """Tier (1-5) for the `index`-th question of a session."""

    per_level = FRACTIONS_RULES["questions_per_level"]
    return min(len(FRACTIONS_RULES["levels"]) - 1, index // per_level) + 1


def fraction_to_string(value: Fraction) -> str:
    return f"{value.numerator}/{value.denominator}"


def to_mixed(num: int, den: int) -> str:
    whole, remainder = divmod(num, den)
    if remainder == 0:
        return str(whole)
    return f"{whole} {remainder}/{den}"


def _level_row(level: int) -> dict:
    levels = FRACTIONS_RULES["levels"]
    if not 1 <= level <= len(levels):
        raise RuleConfigurationError(f"No fractions tier {level}")
    return levels[level - 1]


def _proper(rng: random.Random, max_den: int):
    den = rng.randint(2, max_den)
    return rng.randint(1, den - 1), den


def _question(skill: str, level: int, prompt: str, answer: str, kind: str, payload: dict, *id_parts) -> Question:
    return Question(
        id=make_question_id(MODULE, skill, level, *id_parts),
        module=MODULE,
        skill=skill,
        level=level,
        prompt=prompt,
        correct_answer=answer,
        answer_kind=kind,
        payload=payload,
    )


# ------------------------------------------------------------------------- #
# Skills
# ------------------------------------------------------------------------- #

def _define(level: int, rng: random.Random) -> Question:
    num, den = _proper(rng, _level_row(level)["max_den"])
    color = rng.randrange(len(BAR_COLORS))
    return _question(
        "define", level,
        "What fraction of the bar is shaded?",
        f"{num}/{den}", "text",
        {"bar": {"num": num, "den": den}, "color": BAR_COLORS[color]},
        f"{num}/{den}",
    )


def _unsimplified(level: int, rng: random.Random):
    max_den = _level_row(level)["max_den"]
    base_num, base_den = _proper(rng, max(2, max_den // 2))
    multiplier = rng.randint(2, max(2, min(4, max_den // base_den)))
    return base_num * multiplier, base_den * multiplier


def _gcd_simplify(level: int, rng: random.Random) -> Question:
    num, den = _unsimplified(level, rng)
    g = gcd(num, den)
    simplified = fraction_to_string(Fraction(num, den))
    return _question(
        "gcdSimplify", level,
        f"Find the greatest common factor of {num} and {den}, then simplify {num}/{den}",
        f"{g},{simplified}", "gcd_simplify",
        {"fraction": {"num": num, "den": den}, "gcd": g, "simplified": simplified},
        f"{num}/{den}",
    )


def _simplify(level: int, rng: random.Random) -> Question:
    num, den = _unsimplified(level, rng)
    return _question(
        "simplify", level,
        f"Simplify {num}/{den} to lowest terms",
        fraction_to_string(Fraction(num, den)), "text",
        {"fraction": {"num": num, "den": den}},
        f"{num}/{den}",
    )


def _equivalent(level: int, rng: random.Random) -> Question:
    max_den = _level_row(level)["max_den"]
    num, den = _proper(rng, max_den)

    if level == 1:
        factor = rng.randint(2, 4)
        if rng.random() < 0.5:
            equation = f"{num}/{den} = ?/{den * factor}"
            answer = str(num * factor)
        else:
            equation = f"{num}/{den} = {num * factor}/?"
            answer = str(den * factor)
        return _question(
            "equivalent", level,
            f"Fill in the missing number: {equation}",
            answer, "numeric",
            {"fraction": {"num": num, "den": den}, "equation": equation},
            equation,
        )

    k1, k2 = rng.sample(range(2, 5), 2)
    correct = [f"{num * k1}/{den * k1}", f"{num * k2}/{den * k2}"]
    options = list(correct)
    while len(options) < 4:
        wrong_num, wrong_den = rng.randint(1, max_den), rng.randint(2, max_den)
        if wrong_num * den == wrong_den * num:
            continue
        candidate = f"{wrong_num}/{wrong_den}"
        if candidate not in options:
            options.append(candidate)

    return Question(
        id=make_question_id(MODULE, "equivalent", level, f"{num}/{den}", *sorted(options)),
        module=MODULE,
        skill="equivalent",
        level=level,
        prompt=f"Select all fractions equivalent to {num}/{den}",
        correct_answer=",".join(correct),
        options=shuffled(options, rng),
        correct_options=tuple(correct),
        answer_kind="multi_select",
        payload={"fraction": {"num": num, "den": den}},
    )


def _add_sub(level: int, rng: random.Random) -> Question:
    max_den = _level_row(level)["max_den"]
    n1, d1 = _proper(rng, max_den)
    n2, d2 = _proper(rng, max_den)
    left, right = Fraction(n1, d1), Fraction(n2, d2)

    op = rng.choice(("+", "-"))
    result = left - right if op == "-" else left + right
    if result <= 0:
        op, result = "+", left + right

    return _question(
        "addSub", level,
        f"{n1}/{d1} {op} {n2}/{d2} = ?",
        fraction_to_string(result), "numeric",
        {"left": {"num": n1, "den": d1}, "right": {"num": n2, "den": d2}, "op": op},
        f"{n1}/{d1}{op}{n2}/{d2}",
    )


def _mul_div(level: int, rng: random.Random) -> Question:
    max_den = _level_row(level)["max_den"]
    n1, d1 = _proper(rng, max_den)
    n2, d2 = _proper(rng, max_den)
    left, right = Fraction(n1, d1), Fraction(n2, d2)

    op = rng.choice(("×", "÷"))
    result = left * right if op == "×" else left / right

    return _question(
        "mulDiv", level,
        f"{n1}/{d1} {op} {n2}/{d2} = ?",
        fraction_to_string(result), "numeric",
        {"left": {"num": n1, "den": d1}, "right": {"num": n2, "den": d2}, "op": op},
        f"{n1}/{d1}{op}{n2}/{d2}",
    )


def _mixed_improper(level: int, rng: random.Random) -> Question:
    _level_row(level)
    whole = rng.randint(1, 3)
    den = rng.randint(2, 8)
    num = rng.randint(1, den - 1)
    improper = f"{whole * den + num}/{den}"
    mixed = f"{whole} {num}/{den}"

    if rng.random() < 0.5:
        given, answer, target = mixed, improper, "an improper fraction"
    else:
        given, answer, target = improper, mixed, "a mixed number"

    return _question(
        "mixedImproper", level,
        f"Convert {given} to {target}",
        answer, "text",
        {"given": given},
        given,
    )


_SKILLS = {
    "define": _define,
    "gcdSimplify": _gcd_simplify,
    "simplify": _simplify,
    "equivalent": _equivalent,
    "addSub": _add_sub,
    "mulDiv": _mul_div,
    "mixedImproper": _mixed_improper,
}


def generate(skill: str, level: int, rng: random.Random) -> Question:
    builder = _SKILLS.get(skill)
    if builder is None:
        raise UnknownSkillError(MODULE, skill)
    return builder(level, rng)


def generate_fraction_set(
    skill: str,
    rng: random.Random,
    count: Optional[int] = None,
) -> List[Question]:
    count = count or FRACTIONS_RULES["question_count"]
    return [generate(skill, level_for_index(i), rng) for i in range(count)]
