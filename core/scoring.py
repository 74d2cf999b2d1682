"""
scoring.py

Session and token bookkeeping. A finished session is scored against its
module's rule: tokens for correct answers (per answer or per batch), plus a
flat bonus only for a perfect run. `passed` uses the module's threshold and
says nothing about mastery.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.errors import InvalidSubmissionError, UnknownSkillError
from core.rules import (
    DECIMAL_DEFENDER_RULES,
    FRACTIONS_RULES,
    MATH_FACTS_CONFIG,
    MATH_RUSH_RULES,
    RATIOS_RULES,
)


@dataclass(frozen=True)
class ScoringRule:
    tokens_per_correct: int = 0
    batch_size: int = 1
    tokens_per_batch: int = 0
    bonus_tokens_perfect: int = 0
    pass_threshold: float = 0.8

    @property
    def is_batch(self) -> bool:
        return self.tokens_per_batch > 0


@dataclass(frozen=True)
class SessionScore:
    percentage: float
    passed: bool
    tokens_earned: int
    perfect: bool = False


@dataclass(frozen=True)
class SessionResult:
    correct: int
    total: int
    duration_sec: float = 0
    tokens_earned: int = 0


MODULE_SCORING_RULES = {
    "math_facts": ScoringRule(
        tokens_per_correct=MATH_FACTS_CONFIG["tokens_per_correct"],
        bonus_tokens_perfect=MATH_FACTS_CONFIG["bonus_tokens_perfect"],
        pass_threshold=MATH_FACTS_CONFIG["pass_threshold"],
    ),
    "decimals": ScoringRule(
        tokens_per_correct=DECIMAL_DEFENDER_RULES["tokens_per_correct"],
        bonus_tokens_perfect=DECIMAL_DEFENDER_RULES["bonus_tokens_perfect"],
        pass_threshold=DECIMAL_DEFENDER_RULES["pass_threshold"],
    ),
    "fractions": ScoringRule(
        batch_size=FRACTIONS_RULES["batch_size"],
        tokens_per_batch=FRACTIONS_RULES["tokens_per_batch"],
        bonus_tokens_perfect=FRACTIONS_RULES["bonus_tokens_perfect"],
        pass_threshold=FRACTIONS_RULES["pass_threshold"],
    ),
    "ratios": ScoringRule(
        tokens_per_correct=RATIOS_RULES["tokens_per_correct"],
        bonus_tokens_perfect=RATIOS_RULES["bonus_tokens_perfect"],
        pass_threshold=RATIOS_RULES["pass_threshold"],
    ),
}


# ------------------------------------------------------------------------- #
# Public API
# ------------------------------------------------------------------------- #

def score_session(correct: int, total: int, rule: ScoringRule) -> SessionScore:
    if total < 0 or correct < 0 or correct > total:
        raise InvalidSubmissionError(
            f"Invalid session counts: correct={correct}, total={total}"
        )

    percentage = correct / total if total > 0 else 0.0
    perfect = total > 0 and correct == total

    if rule.is_batch:
        tokens = (correct // rule.batch_size) * rule.tokens_per_batch
    else:
        tokens = correct * rule.tokens_per_correct
    if perfect:
        tokens += rule.bonus_tokens_perfect

    return SessionScore(
        percentage=percentage,
        passed=total > 0 and percentage >= rule.pass_threshold,
        tokens_earned=tokens,
        perfect=perfect,
    )


def rush_setting(duration_sec: Optional[float]) -> str:
    """Sessions up to 60 seconds pay the SHORT rate, anything longer LONG."""

    short_sec = MATH_RUSH_RULES["time_settings"]["SHORT"]["sec"]
    if duration_sec is None or duration_sec <= short_sec:
        return "SHORT"
    return "LONG"


def rule_for(module: str, duration_sec: Optional[float] = None) -> ScoringRule:
    """Scoring rule for a module; Math Rush depends on the session length."""

    if module == "math_rush":
        setting = MATH_RUSH_RULES["time_settings"][rush_setting(duration_sec)]
        return ScoringRule(
            batch_size=MATH_RUSH_RULES["batch_size"],
            tokens_per_batch=setting["tokens_per_batch"],
            bonus_tokens_perfect=setting["bonus_tokens_perfect"],
            pass_threshold=MATH_RUSH_RULES["pass_threshold"],
        )

    rule = MODULE_SCORING_RULES.get(module)
    if rule is None:
        raise UnknownSkillError(module)
    return rule


def score_module_session(
    module: str,
    correct: int,
    total: int,
    duration_sec: Optional[float] = None,
) -> SessionScore:
    return score_session(correct, total, rule_for(module, duration_sec))


def micro_tokens(correct: int) -> int:
    """Tokens dripped during play: one per three correct answers."""

    return max(0, correct) // MATH_RUSH_RULES["micro_token_batch"]
