"""
Portfolio Aggregator

Pure reductions over a collection of scored customers, used for dashboard
summaries. Every function is total: the empty portfolio gives zero counts and
zero averages.

Works on anything exposing risk_score / days_overdue / outstanding_amount
(ORM rows, API schemas, test doubles).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol, Sequence

from app.scoring.risk import (
    HIGH_RISK_THRESHOLD,
    MODERATE_RISK_THRESHOLD,
    RiskStatus,
    classify_tier,
)

TOP_ACCOUNTS_LIMIT = 5


class ScoredAccount(Protocol):
    risk_score: int
    days_overdue: int
    outstanding_amount: Any


@dataclass(frozen=True)
class Bucket:
    label: str
    lower: float            # exclusive, except the first bucket which includes it
    upper: Optional[float]  # inclusive; None = unbounded
    count: int = 0


# (label, lower, upper) — first bucket is closed [0, upper]
OVERDUE_BUCKETS: list[tuple[str, float, Optional[float]]] = [
    ("0-30 days", 0, 30),
    ("31-60 days", 30, 60),
    ("61-90 days", 60, 90),
    ("90+ days", 90, None),
]

AMOUNT_BUCKETS: list[tuple[str, float, Optional[float]]] = [
    ("$0-$1,000", 0, 1_000),
    ("$1,001-$5,000", 1_000, 5_000),
    ("$5,001-$10,000", 5_000, 10_000),
    ("$10,000+", 10_000, None),
]


@dataclass
class PortfolioStats:
    total_count: int = 0
    high_risk_count: int = 0
    moderate_risk_count: int = 0
    low_risk_count: int = 0
    total_outstanding: float = 0.0
    avg_risk_score: float = 0.0
    avg_days_overdue: float = 0.0
    overdue_distribution: list[Bucket] = field(default_factory=list)
    amount_distribution: list[Bucket] = field(default_factory=list)
    top_accounts: list[Any] = field(default_factory=list)

    def tier_percentage(self, count: int) -> float:
        if self.total_count == 0:
            return 0.0
        return count * 100 / self.total_count


def _amount(account: ScoredAccount) -> float:
    return float(account.outstanding_amount or 0)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def count_high_risk(accounts: Sequence[ScoredAccount]) -> int:
    return sum(1 for a in accounts if a.risk_score >= HIGH_RISK_THRESHOLD)


def count_moderate_risk(accounts: Sequence[ScoredAccount]) -> int:
    return sum(
        1 for a in accounts
        if MODERATE_RISK_THRESHOLD <= a.risk_score < HIGH_RISK_THRESHOLD
    )


def count_low_risk(accounts: Sequence[ScoredAccount]) -> int:
    return sum(1 for a in accounts if a.risk_score < MODERATE_RISK_THRESHOLD)


def total_outstanding(accounts: Sequence[ScoredAccount]) -> float:
    return sum(_amount(a) for a in accounts)


def average_risk_score(accounts: Sequence[ScoredAccount]) -> float:
    return _mean([a.risk_score for a in accounts])


def average_days_overdue(accounts: Sequence[ScoredAccount]) -> float:
    return _mean([a.days_overdue for a in accounts])


def _in_bucket(value: float, index: int, lower: float, upper: Optional[float]) -> bool:
    above = value >= lower if index == 0 else value > lower
    below = upper is None or value <= upper
    return above and below


def distribute(values: Sequence[float], buckets) -> list[Bucket]:
    """
    Count values per bucket. Values below the first bound (only possible with
    bad data) land in the first bucket so the counts always sum to len(values).
    """
    counts = [0] * len(buckets)
    for value in values:
        for index, (_, lower, upper) in enumerate(buckets):
            if _in_bucket(value, index, lower, upper):
                counts[index] += 1
                break
        else:
            counts[0] += 1
    return [
        Bucket(label=label, lower=lower, upper=upper, count=counts[i])
        for i, (label, lower, upper) in enumerate(buckets)
    ]


def overdue_distribution(accounts: Sequence[ScoredAccount]) -> list[Bucket]:
    return distribute([a.days_overdue for a in accounts], OVERDUE_BUCKETS)


def amount_distribution(accounts: Sequence[ScoredAccount]) -> list[Bucket]:
    return distribute([_amount(a) for a in accounts], AMOUNT_BUCKETS)


def top_outstanding(accounts: Sequence[ScoredAccount], limit: int = TOP_ACCOUNTS_LIMIT) -> list:
    # sorted() is stable → ties keep their original order
    return sorted(accounts, key=_amount, reverse=True)[:limit]


def summarize_portfolio(
    accounts: Iterable[ScoredAccount],
    top_limit: int = TOP_ACCOUNTS_LIMIT,
) -> PortfolioStats:
    accounts = list(accounts)
    return PortfolioStats(
        total_count=len(accounts),
        high_risk_count=count_high_risk(accounts),
        moderate_risk_count=count_moderate_risk(accounts),
        low_risk_count=count_low_risk(accounts),
        total_outstanding=total_outstanding(accounts),
        avg_risk_score=average_risk_score(accounts),
        avg_days_overdue=average_days_overdue(accounts),
        overdue_distribution=overdue_distribution(accounts),
        amount_distribution=amount_distribution(accounts),
        top_accounts=top_outstanding(accounts, top_limit),
    )


def portfolio_recommendations(stats: PortfolioStats) -> list[str]:
    return [
        f"Focus agent resources on {stats.high_risk_count} high-risk accounts for maximum recovery",
        f"Implement automated reminders for {stats.low_risk_count} low-risk customers "
        f"to reduce operational costs",
    ]


# ═══════════════════════════════════════════════════════════════
# Customer list search / filter
# ═══════════════════════════════════════════════════════════════

def matches_search(customer: Any, search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    if term in (customer.name or "").lower():
        return True
    if customer.email and term in customer.email.lower():
        return True
    return bool(customer.phone and search in customer.phone)


def matches_status(customer: Any, status: Optional[str]) -> bool:
    if not status or status == "all":
        return True
    return customer.status == RiskStatus(status).value


def filter_customers(customers: Iterable[Any], search: str = "", status: Optional[str] = None) -> list:
    """
    Filter by stored status (the snapshot taken at upload), not by a
    re-derived tier.
    """
    return [c for c in customers if matches_search(c, search) and matches_status(c, status)]


def current_tier(customer: ScoredAccount) -> RiskStatus:
    return classify_tier(customer.risk_score)
