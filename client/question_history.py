"""
question_history.py

Client-side duplicate avoidance. A `SeenQuestions` object lives for one
practice session and remembers the most recent question ids. Each fetch sends
those ids as exclusions; if the server still answers with a repeat, the fetch
is retried a bounded number of times and then the repeat is accepted.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Mapping

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 50
MAX_RETRIES = 5

# fetch(exclude_ids, force_dynamic) -> question mapping with an "id" key
QuestionFetcher = Callable[[List[str], bool], Mapping[str, Any]]


@dataclass
class FetchResult:
    question: Mapping[str, Any]
    attempts: int
    duplicate: bool


class SeenQuestions:
    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE, max_retries: int = MAX_RETRIES):
        self.max_size = max_size
        self.max_retries = max_retries
        self._ids: Deque[str] = deque(maxlen=max_size)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def remember(self, question_id: str) -> None:
        """Records an id as most recent; the oldest id drops off when full."""

        if question_id in self._ids:
            self._ids.remove(question_id)
        self._ids.append(question_id)

    def clear(self) -> None:
        self._ids.clear()

    def fetch_unique(self, fetch: QuestionFetcher) -> FetchResult:
        """
        Calls `fetch` until it returns an unseen question or the retry budget
        runs out. Retries ask for dynamic generation. Running out is not an
        error: the last question is served even if it is a repeat.
        """

        attempts = 0
        question = fetch(self.ids, False)
        attempts += 1

        while question["id"] in self and attempts <= self.max_retries:
            question = fetch(self.ids, True)
            attempts += 1

        duplicate = question["id"] in self
        if duplicate:
            logger.info("Accepting repeat question %s after %d attempts", question["id"], attempts)
        self.remember(question["id"])
        return FetchResult(question=question, attempts=attempts, duplicate=duplicate)
