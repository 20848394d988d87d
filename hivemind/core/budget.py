"""
Budget Ledger for HiveMind Workspace

Sessions and the Agent Hub share one ledger per account. The ledger is
the only place spend is accepted or rejected; callers branch on the
boolean returned by record_spend.
"""

import threading
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class BudgetLedger(Protocol):
    """Interface consumed by sessions for AI usage accounting."""

    def get_budget_remaining(self) -> float:
        ...

    def record_spend(self, cost: float) -> bool:
        ...


@dataclass
class SpendRecord:
    """An accepted spend."""
    cost: float
    remaining_after: float
    recorded_at: datetime


class LocalBudgetLedger:
    """
    Thread-safe in-memory ledger.

    A spend is accepted only when it fits entirely in the remaining
    budget. Rejected spends leave the balance untouched.
    """

    def __init__(self, initial_budget: float = 5.00,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the ledger.

        Args:
            initial_budget: Starting balance in currency units
            clock: Timestamp source for spend records
        """
        self.initial_budget = float(initial_budget)
        self._remaining = float(initial_budget)
        self._history: List[SpendRecord] = []
        self._clock = clock or datetime.now
        self._lock = threading.RLock()

    def get_budget_remaining(self) -> float:
        with self._lock:
            return self._remaining

    def record_spend(self, cost: float) -> bool:
        """
        Attempt to spend `cost` from the remaining budget.

        Returns:
            True if the spend was accepted, False if it would overdraw
        """
        with self._lock:
            if cost > self._remaining:
                logger.warning(
                    f"Rejected spend of {cost:.4f}: only {self._remaining:.4f} remaining"
                )
                return False

            # Balance kept to micro-unit precision
            self._remaining = round(self._remaining - cost, 6)
            self._history.append(SpendRecord(cost, self._remaining, self._clock()))

        logger.debug(f"Recorded spend of {cost:.4f}")
        return True

    def total_spent(self) -> float:
        with self._lock:
            return round(sum(record.cost for record in self._history), 6)

    def get_spend_history(self) -> List[SpendRecord]:
        with self._lock:
            return list(self._history)
