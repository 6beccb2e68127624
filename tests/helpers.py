"""Shared test doubles."""
from dataclasses import dataclass
from typing import Optional


class FixedRandom:
    """Stands in for random.Random: randint always returns the same draw (clamped to range)."""

    def __init__(self, value: int):
        self.value = value

    def randint(self, a: int, b: int) -> int:
        return max(a, min(b, a + self.value))


class MaxRandom:
    def randint(self, a: int, b: int) -> int:
        return b


@dataclass
class Account:
    risk_score: int
    days_overdue: int = 0
    outstanding_amount: float = 0.0
    name: str = "Customer"
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str = "low_risk"
