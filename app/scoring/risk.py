"""
Risk Scorer & Tier Classifier

Score = overdue contribution + amount contribution + random adjustment,
clamped to [0, 100].

Each contribution takes only the HIGHEST matching bracket (not cumulative)
and every threshold is strictly greater-than.

Convention: HIGHER score = HIGHER collection risk.

The random adjustment is part of the model: re-scoring identical rows yields
different scores. The generator is always passed in so callers (and tests)
control the seed.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

MIN_SCORE = 0
MAX_SCORE = 100
RANDOM_ADJUSTMENT_MAX = 29  # inclusive


class RiskStatus(str, Enum):
    HIGH_RISK = "high_risk"
    MODERATE_RISK = "moderate_risk"
    LOW_RISK = "low_risk"


# ═══════════════════════════════════════════════════════════════
# Brackets: (exclusive lower bound, points), highest first
# ═══════════════════════════════════════════════════════════════
OVERDUE_BRACKETS: list[tuple[int, int]] = [
    (90, 40),
    (60, 30),
    (30, 20),
    (0, 10),
]

AMOUNT_BRACKETS: list[tuple[float, int]] = [
    (10_000, 30),
    (5_000, 20),
    (1_000, 10),
]


# ═══════════════════════════════════════════════════════════════
# Tier thresholds — shared by status, label and colour
#   score >= 70  → high_risk
#   score >= 40  → moderate_risk
#   score <  40  → low_risk
# ═══════════════════════════════════════════════════════════════
HIGH_RISK_THRESHOLD = 70
MODERATE_RISK_THRESHOLD = 40

TIER_THRESHOLDS = [
    (HIGH_RISK_THRESHOLD, RiskStatus.HIGH_RISK),
    (MODERATE_RISK_THRESHOLD, RiskStatus.MODERATE_RISK),
]

STATUS_LABELS = {
    RiskStatus.HIGH_RISK: "High Risk",
    RiskStatus.MODERATE_RISK: "Moderate",
    RiskStatus.LOW_RISK: "Low Risk",
}

STATUS_COLORS = {
    RiskStatus.HIGH_RISK: "#ef4444",      # danger
    RiskStatus.MODERATE_RISK: "#f59e0b",  # warning
    RiskStatus.LOW_RISK: "#10b981",       # success
}


@dataclass(frozen=True)
class RiskScoreResult:
    overdue_points: int
    amount_points: int
    random_points: int
    risk_score: int
    status: RiskStatus

    @property
    def deterministic_points(self) -> int:
        return self.overdue_points + self.amount_points


def _bracket_points(value: float, brackets) -> int:
    for lower_bound, points in brackets:
        if value > lower_bound:
            return points
    return 0


def overdue_contribution(days_overdue: int) -> int:
    return _bracket_points(days_overdue, OVERDUE_BRACKETS)


def amount_contribution(outstanding_amount: float) -> int:
    return _bracket_points(outstanding_amount, AMOUNT_BRACKETS)


def random_adjustment(rng: random.Random) -> int:
    return rng.randint(0, RANDOM_ADJUSTMENT_MAX)


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def classify_tier(risk_score: int) -> RiskStatus:
    for threshold, status in TIER_THRESHOLDS:
        if risk_score >= threshold:
            return status
    return RiskStatus.LOW_RISK


def risk_label(risk_score: int) -> str:
    return STATUS_LABELS[classify_tier(risk_score)]


def risk_color(risk_score: int) -> str:
    return STATUS_COLORS[classify_tier(risk_score)]


def score_customer(
    outstanding_amount: float,
    days_overdue: int,
    rng: random.Random,
) -> RiskScoreResult:
    """
    Score one account and classify it at the moment of computation.
    """
    overdue_points = overdue_contribution(days_overdue)
    amount_points = amount_contribution(outstanding_amount)
    random_points = random_adjustment(rng)

    score = clamp_score(overdue_points + amount_points + random_points)

    return RiskScoreResult(
        overdue_points=overdue_points,
        amount_points=amount_points,
        random_points=random_points,
        risk_score=score,
        status=classify_tier(score),
    )
