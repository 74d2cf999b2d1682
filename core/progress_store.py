from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.notifications import TokenNotifier

logger = logging.getLogger(__name__)


class ModuleProgress(BaseModel):
    """Per-module (or per-operator) progress for one learner."""

    completed_types: List[str] = Field(default_factory=list)
    grade_level: str = "K"
    attempt_good: int = 0
    attempt_bad: int = 0
    tokens_earned: int = 0
    total_questions_answered: int = 0
    correct_answers: int = 0
    sessions_completed: int = 0
    test_taken: bool = False
    mastery_level: bool = False
    last_accuracy: Optional[float] = None


class UserProgressState(BaseModel):
    user_id: str
    grade: str = "3"
    tokens: int = 0
    questions_answered: int = 0
    correct_answers: int = 0
    modules: Dict[str, ModuleProgress] = Field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        if not self.questions_answered:
            return 0.0
        return self.correct_answers / self.questions_answered


def module_key(module: str, skill: Optional[str] = None) -> str:
    """`math_rush:addition`, `math_facts:division`, `fractions`..."""

    return f"{module}:{skill}" if skill else module


class InMemoryProgressStore:
    """
    Stand-in for the external user store. Token changes are published through
    the notifier so connected clients see the authoritative balance.
    """

    def __init__(self, notifier: Optional[TokenNotifier] = None, default_grade: str = "3"):
        self.notifier = notifier or TokenNotifier()
        self.default_grade = default_grade
        self._users: Dict[str, UserProgressState] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get(self, user_id: str) -> Optional[UserProgressState]:
        return self._users.get(user_id)

    def get_or_create(self, user_id: str, grade: Optional[str] = None) -> UserProgressState:
        with self._lock:
            state = self._users.get(user_id)
            if state is None:
                state = UserProgressState(user_id=user_id, grade=grade or self.default_grade)
                self._users[user_id] = state
                logger.debug("Created progress record for user %s", user_id)
            return state

    def save(self, state: UserProgressState) -> UserProgressState:
        with self._lock:
            self._users[state.user_id] = state
            self._persist()
        return state

    def module_progress(self, user_id: str, key: str) -> ModuleProgress:
        state = self.get_or_create(user_id)
        if key not in state.modules:
            state.modules[key] = ModuleProgress(grade_level=state.grade)
        return state.modules[key]

    def add_tokens(self, user_id: str, amount: int) -> int:
        """Adds (or with a negative amount removes) tokens; returns the new balance."""

        state = self.get_or_create(user_id)
        state.tokens = max(0, state.tokens + amount)
        self.save(state)
        if amount:
            self.notifier.publish(user_id, state.tokens)
        return state.tokens

    def set_grade(self, user_id: str, grade: str) -> UserProgressState:
        state = self.get_or_create(user_id)
        state.grade = grade
        return self.save(state)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _persist(self) -> None:
        """Nothing to write for the in-memory store."""


class JsonProgressStore(InMemoryProgressStore):
    """Keeps every learner's state in one JSON file, rewritten on save."""

    def __init__(
        self,
        path: Path,
        notifier: Optional[TokenNotifier] = None,
        default_grade: str = "3",
    ):
        super().__init__(notifier=notifier, default_grade=default_grade)
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._users = {
            user_id: UserProgressState(**record)
            for user_id, record in self._read_file().get("users", {}).items()
        }

    def _read_file(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {"users": {}}
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Progress file %s is not valid JSON; starting empty", self._path)
            return {"users": {}}

    def _persist(self) -> None:
        payload = {"users": {uid: s.model_dump() for uid, s in self._users.items()}}
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
