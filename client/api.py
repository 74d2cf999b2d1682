"""
api.py

Thin `requests` client for the practice API, plus adapters that plug it into
the question history and the token ledger.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from client.question_history import SeenQuestions
from client.token_ledger import DEFAULT_POLL_INTERVAL_SEC, TokenLedger, TokenUpdate

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the practice API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class PracticeApiClient:
    def __init__(
        self,
        base_url: str,
        user_id: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def next_question(
        self,
        module: str,
        skill: str,
        level: Optional[int] = None,
        step: Optional[str] = None,
        exclude: Iterable[str] = (),
        force_dynamic: bool = False,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"module": module, "skill": skill}
        if level is not None:
            params["level"] = level
        if step:
            params["step"] = step
        excluded = list(exclude)
        if excluded:
            params["exclude"] = ",".join(excluded)
        if force_dynamic:
            params["forceDynamic"] = "true"
        return self._request("GET", "/api/questions/next", params=params)

    def submit_answer(self, question_id: str, answer: Any) -> Dict[str, Any]:
        return self._request("POST", "/api/answer", json={"question_id": question_id, "answer": answer})

    def complete_session(
        self,
        module: str,
        correct: int,
        total: int,
        duration_sec: float = 0,
        skill: Optional[str] = None,
        step: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {"correct": correct, "total": total, "duration_sec": duration_sec, "skill": skill, "step": step}
        return self._request("POST", f"/api/{module}/complete", json=body)

    def recommendations(self) -> Dict[str, Any]:
        return self._request("GET", "/api/recommendations")

    def rush_progression(self, operator: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/math-rush/{operator}/progression")

    def rush_assessment(self, operator: str, answers: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request("POST", f"/api/math-rush/{operator}/assessment", json={"answers": answers})

    def token_balance(self) -> int:
        return self._request("GET", "/api/tokens")["tokens"]

    def post_micro_tokens(self, correct: int) -> int:
        return self._request("POST", "/api/tokens/micro", json={"correct": correct})["tokens"]

    # ------------------------------------------------------------------ #
    # Adapters
    # ------------------------------------------------------------------ #

    def unique_question(
        self,
        history: SeenQuestions,
        module: str,
        skill: str,
        level: Optional[int] = None,
        step: Optional[str] = None,
    ) -> Dict[str, Any]:
        result = history.fetch_unique(
            lambda exclude, force: self.next_question(
                module, skill, level=level, step=step, exclude=exclude, force_dynamic=force
            )
        )
        return dict(result.question)

    def token_ledger(
        self,
        balance: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ) -> TokenLedger:
        """
        Ledger seeded with the server balance. It re-syncs at the interval the
        server advertises unless `poll_interval` overrides it.
        """

        if balance is None or poll_interval is None:
            status = self._request("GET", "/api/tokens")
            if balance is None:
                balance = status["tokens"]
            if poll_interval is None:
                poll_interval = status.get("poll_interval_sec", DEFAULT_POLL_INTERVAL_SEC)
        return TokenLedger(
            transport=self._send_token_update,
            balance=balance,
            poll_interval=poll_interval,
            fetch_balance=self.token_balance,
            beacon=self._beacon_token_update,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _send_token_update(self, update: TokenUpdate) -> int:
        return self.post_micro_tokens(update.correct_answers)

    def _beacon_token_update(self, update: TokenUpdate) -> None:
        # short timeout, response ignored
        self.session.post(
            f"{self.base_url}/api/tokens/micro",
            json={"correct": update.correct_answers},
            headers=self._headers(),
            timeout=1.0,
        )

    def _headers(self) -> Dict[str, str]:
        return {"X-User-Id": self.user_id}

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        if not response.ok:
            try:
                message = response.json().get("error", response.reason)
            except ValueError:
                message = response.reason
            raise ApiError(response.status_code, message)
        return response.json()
