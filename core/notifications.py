"""
notifications.py

Per-user pub/sub for token balances. The payload is always the single
authoritative balance; subscribers replace whatever they hold locally.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

BalanceListener = Callable[[int], None]


class TokenNotifier:
    def __init__(self):
        self._listeners: Dict[str, List[BalanceListener]] = defaultdict(list)

    def subscribe(self, user_id: str, listener: BalanceListener) -> Callable[[], None]:
        """Registers `listener`; call the returned function to unsubscribe."""

        self._listeners[user_id].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners.get(user_id, []):
                self._listeners[user_id].remove(listener)

        return unsubscribe

    def publish(self, user_id: str, balance: int) -> int:
        """Sends `balance` to every listener of `user_id`; returns how many got it."""

        delivered = 0
        for listener in list(self._listeners.get(user_id, [])):
            try:
                listener(balance)
            except Exception:
                # a broken connection must not block the other listeners
                logger.exception("Token listener for user %s failed", user_id)
                continue
            delivered += 1
        return delivered

    def listener_count(self, user_id: str) -> int:
        return len(self._listeners.get(user_id, []))
