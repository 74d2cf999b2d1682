"""
token_ledger.py

Optimistic client-side token balance for timed play. Micro updates raise the
local balance immediately and wait in a queue until the server acknowledges
them. The server balance always wins on reconciliation.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional

from core.scoring import micro_tokens

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SEC = 30


@dataclass
class TokenUpdate:
    operator: str
    correct_answers: int
    timestamp: float = field(default_factory=time.time)


# Sends one update; returns the server balance (or None) and raises on failure.
Transport = Callable[[TokenUpdate], Optional[int]]
# Fire-and-forget send used while the page is going away.
BeaconTransport = Callable[[TokenUpdate], None]
# Fetches the authoritative balance.
BalanceFetcher = Callable[[], int]


class TokenLedger:
    def __init__(
        self,
        transport: Transport,
        balance: int = 0,
        fetch_balance: Optional[BalanceFetcher] = None,
        beacon: Optional[BeaconTransport] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.transport = transport
        self.fetch_balance = fetch_balance
        self.beacon = beacon
        self.poll_interval = poll_interval
        self.clock = clock

        self.balance = balance
        self.queue: Deque[TokenUpdate] = deque()
        self.last_sync = clock()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def record(self, operator: str, correct_answers: int, flush: bool = True) -> int:
        """
        Credits the local balance right away and queues the update. Returns
        the tokens credited; nothing is queued when that is zero.
        """

        earned = micro_tokens(correct_answers)
        if earned <= 0:
            return 0

        self.balance += earned
        self.queue.append(TokenUpdate(operator=operator, correct_answers=correct_answers))
        if flush:
            self.flush()
        return earned

    def flush(self) -> int:
        """
        Sends queued updates oldest first. Stops at the first failure and
        leaves that update (and everything behind it) queued. Returns how
        many updates were acknowledged.
        """

        sent = 0
        while self.queue:
            update = self.queue[0]
            try:
                server_balance = self.transport(update)
            except Exception as exc:
                logger.warning("Token update for %s not delivered: %s", update.operator, exc)
                break

            self.queue.popleft()
            sent += 1
            if server_balance is not None:
                self.balance = server_balance
        return sent

    def reconcile(self, server_balance: int) -> None:
        """The server is authoritative: its balance replaces the local one."""

        self.balance = server_balance
        self.last_sync = self.clock()

    def maybe_reconcile(self, now: Optional[float] = None) -> bool:
        """Polls the server when the interval has elapsed. Returns True if it did."""

        if self.fetch_balance is None:
            return False

        now = self.clock() if now is None else now
        if now - self.last_sync < self.poll_interval:
            return False

        self.reconcile(self.fetch_balance())
        self.last_sync = now
        return True

    def flush_on_unload(self) -> None:
        """
        Best-effort send of the oldest queued update while the page goes
        away. No retry and no acknowledgement; errors are only logged.
        """

        if not self.queue or self.beacon is None:
            return
        try:
            self.beacon(self.queue[0])
        except Exception as exc:
            logger.warning("Beacon send failed: %s", exc)

    @property
    def pending(self) -> List[TokenUpdate]:
        return list(self.queue)

    def reset(self) -> None:
        self.balance = 0
        self.queue.clear()
        self.last_sync = self.clock()
