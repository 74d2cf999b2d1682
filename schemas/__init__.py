"""
Request and response payloads shared by the web layer and the API client.
"""

from .practice import (
    NextQuestionQuery,
    QuestionPayload,
    AnswerRequest,
    AnswerResponse,
    SessionCompleteRequest,
    SessionCompleteResponse,
    RushAnswerRecord,
    RushAssessmentRequest,
    MicroTokenRequest,
    TokenBalanceResponse,
)

__all__ = [
    "NextQuestionQuery",
    "QuestionPayload",
    "AnswerRequest",
    "AnswerResponse",
    "SessionCompleteRequest",
    "SessionCompleteResponse",
    "RushAnswerRecord",
    "RushAssessmentRequest",
    "MicroTokenRequest",
    "TokenBalanceResponse",
]
