"""
ratios.py

Ratio questions for three skills:

- write_form: rewrite a ratio given as "a to b", "a:b" or "a/b" in another form
- equivalents: missing value (level 1), lowest terms (level 2), and
  select-all-equivalent (level 3 and up)
- visual_identification: count coloured shapes and state a ratio

Levels 1-5 cap operand size via `RATIOS_RULES["levels"]`.
"""

from __future__ import annotations

import random
from math import gcd
from typing import Dict, List, Optional

from core.errors import RuleConfigurationError, UnknownSkillError
from core.rules import RATIOS_RULES
from generators.question import Question, make_question_id, shuffled

MODULE = "ratios"

RATIO_FORMATS: Dict[str, Dict[str, str]] = {
    "to": {"template": "{a} to {b}", "label": "a to b"},
    "colon": {"template": "{a}:{b}", "label": "a:b"},
    "fraction": {"template": "{a}/{b}", "label": "a/b"},
}

SHAPE_TYPES = ("circle", "square", "triangle")
SHAPE_COLORS = ("blue", "orange")


def format_ratio(a: int, b: int, fmt: str) -> str:
    return RATIO_FORMATS[fmt]["template"].format(a=a, b=b)


def is_equivalent_ratio(a: int, b: int, c: int, d: int) -> bool:
    """a:b == c:d by cross-multiplication."""

    return a * d == b * c


def _max_value(level: int) -> int:
    try:
        return RATIOS_RULES["levels"][level]["max_value"]
    except KeyError:
        raise RuleConfigurationError(f"No ratios rule row for level {level}") from None


# ------------------------------------------------------------------------- #
# write_form
# ------------------------------------------------------------------------- #

def generate_write_form_question(
    a: int,
    b: int,
    given: str,
    requested: str,
    level: int = 1,
) -> Question:
    """Builds the question for fixed operands and formats."""

    if given not in RATIO_FORMATS or requested not in RATIO_FORMATS:
        raise RuleConfigurationError(f"Unknown ratio format: {given!r} / {requested!r}")

    prompt = (
        f"The ratio {format_ratio(a, b, given)} written in "
        f"\"{RATIO_FORMATS[requested]['label']}\" format is:"
    )
    return Question(
        id=make_question_id(MODULE, "write_form", a, b, given, requested),
        module=MODULE,
        skill="write_form",
        level=level,
        prompt=prompt,
        correct_answer=format_ratio(a, b, requested),
        answer_kind="ratio",
        payload={"a": a, "b": b, "given_format": given, "requested_format": requested},
    )


def _write_form(level: int, rng: random.Random) -> Question:
    max_value = _max_value(level)
    a = rng.randint(1, max_value)
    b = rng.randint(1, max_value)
    given = rng.choice(list(RATIO_FORMATS))
    requested = rng.choice([f for f in RATIO_FORMATS if f != given])
    return generate_write_form_question(a, b, given, requested, level)


# ------------------------------------------------------------------------- #
# equivalents
# ------------------------------------------------------------------------- #

def _equivalents(level: int, rng: random.Random) -> Question:
    _max_value(level)

    if level == 1:
        a, b = rng.randint(2, 9), rng.randint(2, 9)
        k = rng.randint(2, 5)
        equation = f"x:{b} = {a * k}:{b * k}"
        return Question(
            id=make_question_id(MODULE, "equivalents", level, equation),
            module=MODULE,
            skill="equivalents",
            level=level,
            prompt="Find the missing value to make equivalent ratios",
            correct_answer=str(a),
            answer_kind="numeric",
            payload={"equation": equation, "a": a, "b": b, "multiplier": k},
        )

    if level == 2:
        a, b = rng.randint(2, 7), rng.randint(2, 7)
        k = rng.randint(2, 4)
        equation = f"{a * k}:{b * k} = x:y"
        # 4:6 scaled is still answered in lowest terms
        simple_a, simple_b = _lowest_terms(a, b)
        return Question(
            id=make_question_id(MODULE, "equivalents", level, equation),
            module=MODULE,
            skill="equivalents",
            level=level,
            prompt="Simplify this ratio to its lowest terms",
            correct_answer=f"{simple_a}:{simple_b}",
            answer_kind="ratio",
            payload={"equation": equation, "a": a, "b": b, "multiplier": k},
        )

    return _equivalents_multi_select(level, rng)


def _lowest_terms(a: int, b: int):
    g = gcd(a, b) or 1
    return a // g, b // g


def _equivalents_multi_select(level: int, rng: random.Random) -> Question:
    a, b = rng.randint(1, 10), rng.randint(1, 10)

    k1, k2 = rng.sample(range(2, 6), 2)
    correct = [f"{a * k1}:{b * k1}", f"{a * k2}:{b * k2}"]

    incorrect: List[str] = []
    while len(incorrect) < 3:
        x, y = rng.randint(1, 20), rng.randint(1, 20)
        candidate = f"{x}:{y}"
        if is_equivalent_ratio(a, b, x, y):
            continue
        if candidate in correct or candidate in incorrect:
            continue
        incorrect.append(candidate)

    base = f"{a}:{b}"
    return Question(
        id=make_question_id(MODULE, "equivalents", level, base, *sorted(correct + incorrect)),
        module=MODULE,
        skill="equivalents",
        level=level,
        prompt=f"Select all ratios equivalent to {base}",
        correct_answer=",".join(correct),
        options=shuffled(correct + incorrect, rng),
        correct_options=tuple(correct),
        answer_kind="multi_select",
        payload={"base_ratio": base},
    )


# ------------------------------------------------------------------------- #
# visual_identification
# ------------------------------------------------------------------------- #

def _visual(level: int, rng: random.Random) -> Question:
    max_value = _max_value(level)
    total = min(rng.randint(5, 19), max_value)

    shapes = [
        {"type": rng.choice(SHAPE_TYPES), "color": rng.choice(SHAPE_COLORS)}
        for _ in range(total)
    ]
    colors = {s["color"] for s in shapes}
    if len(colors) == 1:
        # never a single-colour set
        only = colors.pop()
        shapes[rng.randrange(total)]["color"] = "orange" if only == "blue" else "blue"

    blue = sum(1 for s in shapes if s["color"] == "blue")
    orange = total - blue
    triangles = sum(1 for s in shapes if s["type"] == "triangle")
    others = total - triangles

    kind = rng.choice(("color", "shape"))
    if kind == "shape" and triangles > 0 and others > 0:
        prompt = "What is the ratio of triangles to all other shapes?"
        answer = f"{triangles}:{others}"
    else:
        prompt = "What is the ratio of blue to orange shapes?"
        answer = f"{blue}:{orange}"
        kind = "color"

    signature = "".join(s["color"][0] + s["type"][0] for s in shapes)
    return Question(
        id=make_question_id(MODULE, "visual_identification", level, signature, kind),
        module=MODULE,
        skill="visual_identification",
        level=level,
        prompt=prompt,
        correct_answer=answer,
        answer_kind="ratio",
        payload={
            "shapes": shapes,
            "total_shapes": total,
            "blue_count": blue,
            "orange_count": orange,
            "triangle_count": triangles,
        },
    )


_SKILLS = {
    "write_form": _write_form,
    "equivalents": _equivalents,
    "visual_identification": _visual,
}


def generate(skill: str, level: int, rng: random.Random) -> Question:
    builder = _SKILLS.get(skill)
    if builder is None:
        raise UnknownSkillError(MODULE, skill)
    return builder(level, rng)


def generate_ratio_set(
    skill: str,
    level: int,
    rng: random.Random,
    count: Optional[int] = None,
) -> List[Question]:
    return [generate(skill, level, rng) for _ in range(count or RATIOS_RULES["question_count"])]
