"""
question_generator.py

Single entry point for question generation. Routes `(module, skill, level)`
to the module generator and handles server-side exclusion of question ids
the client has already seen.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Iterable, Optional, Tuple

from core.errors import InvalidLevelError, UnknownSkillError
from core.rules import DECIMAL_DEFENDER_RULES, FRACTIONS_RULES, OPERATORS, RATIOS_RULES
from generators import decimal_defender, fractions_puzzle, math_facts, math_rush, ratios
from generators.question import Question

logger = logging.getLogger(__name__)

MODULE_SKILLS: Dict[str, Tuple[str, ...]] = {
    "math_facts": OPERATORS,
    "math_rush": OPERATORS + ("mixed",),
    "ratios": RATIOS_RULES["skills"],
    "fractions": FRACTIONS_RULES["skills"],
    "decimals": DECIMAL_DEFENDER_RULES["skills"],
}

# Inclusive bounds; None means no upper bound. Math Rush ignores the level.
LEVEL_RANGES: Dict[str, Tuple[int, Optional[int]]] = {
    "math_facts": (0, None),
    "ratios": (min(RATIOS_RULES["levels"]), max(RATIOS_RULES["levels"])),
    "fractions": (1, len(FRACTIONS_RULES["levels"])),
    "decimals": DECIMAL_DEFENDER_RULES["difficulty_range"],
}

_GENERATORS: Dict[str, Callable[..., Question]] = {
    "math_facts": math_facts.generate,
    "ratios": ratios.generate,
    "fractions": fractions_puzzle.generate,
    "decimals": decimal_defender.generate,
}


def generate(
    module: str,
    skill: str,
    level: int,
    rng: random.Random,
    step: Optional[str] = None,
) -> Question:
    """
    Build one question. Errors propagate; a failed build never returns a
    partial question. An unknown module or skill, or a level outside the
    module's range, is a request error (HTTP 400).
    """

    if module not in MODULE_SKILLS:
        raise UnknownSkillError(module)
    if skill not in MODULE_SKILLS[module]:
        raise UnknownSkillError(module, skill)

    if module in LEVEL_RANGES:
        low, high = LEVEL_RANGES[module]
        if level < low or (high is not None and level > high):
            raise InvalidLevelError(module, level, low, high)

    if module == "math_rush":
        return math_rush.generate(skill, level, rng, step=step)
    return _GENERATORS[module](skill, level, rng)


class QuestionGenerator:
    """
    Facade the web layer talks to. Holds the RNG (seeded for reproducible
    runs) and retries generation when a question id is in the exclusion set.
    """

    def __init__(self, seed: Optional[int] = None, max_attempts: int = 10):
        self.rng = random.Random(seed)
        self.max_attempts = max_attempts

    def generate(
        self,
        module: str,
        skill: str,
        level: int,
        *,
        step: Optional[str] = None,
        exclude: Iterable[str] = (),
        force_dynamic: bool = False,
    ) -> Question:
        # force_dynamic draws from fresh entropy even when the app is seeded
        rng = random.Random() if force_dynamic else self.rng
        excluded = set(exclude or ())

        question = generate(module, skill, level, rng, step=step)
        attempts = 1
        while question.id in excluded and attempts < self.max_attempts:
            question = generate(module, skill, level, rng, step=step)
            attempts += 1

        if question.id in excluded:
            logger.info(
                "Serving repeat %s after %d attempts (%d ids excluded)",
                question.id,
                attempts,
                len(excluded),
            )
        return question


if __name__ == "__main__":
    generator = QuestionGenerator(seed=42)
    for module, skills in MODULE_SKILLS.items():
        q = generator.generate(module, skills[0], 3 if module != "ratios" else 1)
        print(q.id, "->", q.prompt, "=", q.correct_answer)
