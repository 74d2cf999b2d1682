"""
errors.py

Exception hierarchy shared by the generators, the progression evaluator, and
the web layer. Each error carries the HTTP status the API should answer with
so route handlers never have to translate them one by one.
"""

from __future__ import annotations


class MathPracticeError(Exception):
    """Base class for every error raised by the practice core."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class UnknownOperatorError(MathPracticeError):
    """Raised when an operator is not one of the four supported ones."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unknown operator: {operator}")


class UnknownSkillError(MathPracticeError):
    """Raised when a module or skill has no generator behind it."""

    def __init__(self, module: str, skill: str | None = None):
        self.module = module
        self.skill = skill
        if skill is None:
            super().__init__(f"Unknown module: {module}")
        else:
            super().__init__(f"Unknown skill '{skill}' for module '{module}'")


class RuleConfigurationError(MathPracticeError):
    """Raised when a rule table cannot produce a question for a level."""

    status_code = 500


class QuestionNotFoundError(MathPracticeError):
    """Raised when an answer references a question that was never issued."""

    status_code = 404

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Question {question_id} not found")


class InvalidSubmissionError(MathPracticeError):
    """Raised when a request body or query string fails validation."""


class InvalidLevelError(MathPracticeError):
    """Raised when a requested level is outside the module's range."""

    def __init__(self, module: str, level: int, low: int, high: int | None = None):
        self.module = module
        self.level = level
        bounds = f"{low}-{high}" if high is not None else f"{low} or more"
        super().__init__(f"Level {level} is out of range for '{module}' ({bounds})")
