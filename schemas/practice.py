from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# QUESTION SCHEMAS
# =============================================================================

class NextQuestionQuery(BaseModel):
    """Query string of GET /api/questions/next."""

    module: str = Field(..., description="math_facts, math_rush, ratios, fractions or decimals.")
    skill: str = Field(..., description="Operator or skill name within the module.")
    level: Optional[int] = Field(None, ge=0, description="Grade, tier or level; defaults per module.")
    step: Optional[str] = Field(None, description="Math Rush fact family.")
    exclude: List[str] = Field(default_factory=list, description="Question ids already seen.")
    force_dynamic: bool = Field(False, description="Bypass the seeded generator.")

    @field_validator("exclude", mode="before")
    @classmethod
    def split_exclude(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item for item in value.split(",") if item]
        return list(value)


class QuestionPayload(BaseModel):
    id: str
    module: str
    skill: str
    level: int
    prompt: str
    options: List[str] = Field(default_factory=list)
    multi_select: bool = False
    payload: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# ANSWER SCHEMAS
# =============================================================================

class AnswerRequest(BaseModel):
    question_id: str
    answer: Any = Field(..., description="Text answer, or a list of picks for multi-select.")


class AnswerResponse(BaseModel):
    question_id: str
    correct: bool
    correct_answer: str
    message: str
    tokens: int


# =============================================================================
# SESSION SCHEMAS
# =============================================================================

class SessionCompleteRequest(BaseModel):
    correct: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    duration_sec: float = Field(0, ge=0)
    skill: Optional[str] = None
    step: Optional[str] = Field(None, description="Math Rush fact family practised.")

    @model_validator(mode="after")
    def correct_not_above_total(self) -> "SessionCompleteRequest":
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        return self


class SessionCompleteResponse(BaseModel):
    module: str
    percentage: float
    passed: bool
    perfect: bool
    tokens_earned: int
    tokens: int
    grade_level: Optional[str] = None
    grade_change: Optional[Literal["up", "down"]] = None
    completed_types: List[str] = Field(default_factory=list)
    mastery: bool = False


# =============================================================================
# MATH RUSH SCHEMAS
# =============================================================================

class RushAnswerRecord(BaseModel):
    type: str
    is_correct: bool
    question_id: Optional[str] = None


class RushAssessmentRequest(BaseModel):
    answers: List[RushAnswerRecord] = Field(default_factory=list)


# =============================================================================
# TOKEN SCHEMAS
# =============================================================================

class MicroTokenRequest(BaseModel):
    amount: Optional[int] = Field(None, ge=0, description="Tokens to add directly.")
    correct: Optional[int] = Field(None, ge=0, description="Correct answers so far; converted at 1 per 3.")


class TokenBalanceResponse(BaseModel):
    tokens: int
    poll_interval_sec: int = Field(..., ge=1, description="How often clients should re-sync the balance.")
