"""
question.py

The immutable Question record every generator returns, plus the small helpers
generators share (content-signature ids, option shuffling, numeric
distractors).
"""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.errors import RuleConfigurationError

# How the validator should compare an answer to `correct_answer`.
ANSWER_KINDS = ("text", "numeric", "ratio", "gcd_simplify", "multi_select")


@dataclass(frozen=True)
class Question:
    id: str
    module: str
    skill: str
    level: int
    prompt: str
    correct_answer: str
    options: Tuple[str, ...] = ()
    correct_options: Tuple[str, ...] = ()  # multi-select only
    answer_kind: str = "text"
    payload: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.answer_kind not in ANSWER_KINDS:
            raise RuleConfigurationError(f"Unknown answer kind: {self.answer_kind}")

    @property
    def is_multi_select(self) -> bool:
        return self.answer_kind == "multi_select"

    def to_dict(self, include_answer: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        data["options"] = list(self.options)
        data["correct_options"] = list(self.correct_options)
        data["multi_select"] = self.is_multi_select
        if not include_answer:
            data.pop("correct_answer")
            data.pop("correct_options")
        return data


def make_question_id(module: str, skill: str, *parts: Any) -> str:
    """
    Content signature: the same module, skill and operands always give the
    same id, so repeats can be spotted by id alone.
    """

    tail = ":".join(str(p).replace(" ", "") for p in parts)
    return f"{module}:{skill}:{tail}" if tail else f"{module}:{skill}"


def shuffled(items: Iterable[str], rng: random.Random) -> Tuple[str, ...]:
    pool = list(items)
    rng.shuffle(pool)
    return tuple(pool)


def numeric_distractors(
    answer: int,
    rng: random.Random,
    count: int = 3,
    spread: float = 0.2,
) -> List[int]:
    """
    `count` distinct non-negative wrong answers within +/- `spread` of the
    answer. Small answers get a variance of at least 3 so there are always
    enough candidates.
    """

    variance = max(3, int(answer * spread))
    wrong: List[int] = []
    while len(wrong) < count:
        delta = rng.randint(1, variance)
        candidate = answer + delta if rng.random() < 0.5 else max(0, answer - delta)
        if candidate != answer and candidate not in wrong:
            wrong.append(candidate)
    return wrong


def build_options(
    answer: str,
    distractors: Iterable[str],
    rng: random.Random,
    size: Optional[int] = 4,
) -> Tuple[str, ...]:
    options: List[str] = [answer]
    for item in distractors:
        if item not in options:
            options.append(item)
        if size is not None and len(options) >= size:
            break
    return shuffled(options, rng)
