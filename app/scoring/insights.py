"""
Insight Generator — template narrative for a single customer.

Not a model: every line is keyed off the same tier thresholds as the risk
scorer, plus two conditional lines (long overdue, high value). Only two
sub-fields are random, both drawn from the injected generator:
  - the "Communication Response" factor (a simulated signal, not a measurement)
  - the confidence score
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from app.scoring.risk import RiskStatus, classify_tier

ANALYSIS_TYPE = "comprehensive_risk_assessment"

LONG_OVERDUE_DAYS = 60
HIGH_VALUE_AMOUNT = 5_000

CONFIDENCE_BASE = 85
CONFIDENCE_SPREAD = 9          # inclusive → 85..94
COMMUNICATION_BASE = 45
COMMUNICATION_SPREAD = 29      # inclusive → 45..74


TIER_NARRATIVE: dict[RiskStatus, list[str]] = {
    RiskStatus.HIGH_RISK: [
        "Customer shows HIGH risk indicators with significant payment delays",
        "Immediate intervention required to prevent further delinquency",
        "Consider offering structured payment plan to facilitate recovery",
    ],
    RiskStatus.MODERATE_RISK: [
        "Customer demonstrates MODERATE risk with some payment inconsistencies",
        "Proactive engagement recommended to prevent escalation",
        "May respond well to reminder communications and flexible terms",
    ],
    RiskStatus.LOW_RISK: [
        "Customer shows LOW risk profile with manageable debt levels",
        "Automated reminders likely sufficient for timely resolution",
        "Good candidate for self-service payment options",
    ],
}

HIGH_VALUE_LINE = "High-value account - prioritize for personalized agent contact"

ENGAGEMENT_READINESS = {
    RiskStatus.HIGH_RISK: "Low",
    RiskStatus.MODERATE_RISK: "Moderate",
    RiskStatus.LOW_RISK: "High",
}

# (probability_of_recovery, expected_recovery_time)
RECOVERY_OUTLOOK = {
    RiskStatus.HIGH_RISK: ("45-60%", "60-90 days"),
    RiskStatus.MODERATE_RISK: ("65-80%", "30-60 days"),
    RiskStatus.LOW_RISK: ("85-95%", "15-30 days"),
}

FINANCIAL_STABILITY_SCORES = {
    RiskStatus.HIGH_RISK: 80,
    RiskStatus.MODERATE_RISK: 55,
    RiskStatus.LOW_RISK: 30,
}


@dataclass(frozen=True)
class RecommendedAction:
    action: str
    priority: str
    channel: str
    timing: str
    script: str

    def as_dict(self) -> dict[str, str]:
        return {
            "action": self.action,
            "priority": self.priority,
            "channel": self.channel,
            "timing": self.timing,
            "script": self.script,
        }


RECOMMENDED_ACTIONS: dict[RiskStatus, list[RecommendedAction]] = {
    RiskStatus.HIGH_RISK: [
        RecommendedAction(
            "Immediate Agent Contact", "Critical", "Phone Call", "Within 24 hours",
            "Empathetic approach focusing on payment plan options and hardship assessment",
        ),
        RecommendedAction(
            "Offer Payment Plan", "High", "Follow-up Email", "After initial contact",
            "Present flexible 3-6 month payment plan with reduced interest",
        ),
        RecommendedAction(
            "Escalation Review", "Medium", "Internal", "If no response in 7 days",
            "Prepare for potential collections agency referral",
        ),
    ],
    RiskStatus.MODERATE_RISK: [
        RecommendedAction(
            "Personalized Email Reminder", "High", "Email", "Within 3 days",
            "Friendly reminder with payment options and contact information",
        ),
        RecommendedAction(
            "SMS Notification", "Medium", "SMS", "Day 5 if no response",
            "Brief payment reminder with direct payment link",
        ),
        RecommendedAction(
            "Agent Follow-up", "Medium", "Phone", "Day 10 if unresolved",
            "Check-in call to discuss payment obstacles and solutions",
        ),
    ],
    RiskStatus.LOW_RISK: [
        RecommendedAction(
            "Automated Email Reminder", "Low", "Email", "Within 7 days",
            "Standard payment reminder with self-service portal link",
        ),
        RecommendedAction(
            "Self-Service Portal", "Low", "Online", "Immediate",
            "Provide easy access to online payment and account management",
        ),
    ],
}


@dataclass(frozen=True)
class CustomerInsight:
    ai_insights: dict[str, Any]
    risk_assessment: dict[str, Any]
    recommended_actions: list[dict[str, str]]
    confidence_score: int
    analysis_type: str = ANALYSIS_TYPE


def generate_ai_insights(risk_score: int, days_overdue: int, outstanding_amount: float) -> dict[str, Any]:
    tier = classify_tier(risk_score)
    insights = list(TIER_NARRATIVE[tier])

    if days_overdue > LONG_OVERDUE_DAYS:
        insights.append(f"Payment is {days_overdue} days overdue - urgency level HIGH")

    if outstanding_amount > HIGH_VALUE_AMOUNT:
        insights.append(HIGH_VALUE_LINE)

    if tier == RiskStatus.HIGH_RISK:
        emotional = "High stress, potential financial hardship"
    else:
        emotional = "Moderate willingness to engage"

    return {
        "summary": insights[0],
        "details": insights,
        "emotional_indicators": emotional,
        "engagement_readiness": ENGAGEMENT_READINESS[tier],
    }


def payment_history_score(days_overdue: int) -> int:
    if days_overdue > 60:
        return 85
    elif days_overdue > 30:
        return 60
    return 30


def outstanding_amount_score(outstanding_amount: float) -> int:
    if outstanding_amount > 5_000:
        return 75
    elif outstanding_amount > 1_000:
        return 50
    return 25


def communication_response_score(rng: random.Random) -> int:
    # Simulated: no communication data is collected yet
    return COMMUNICATION_BASE + rng.randint(0, COMMUNICATION_SPREAD)


def generate_risk_assessment(
    risk_score: int,
    days_overdue: int,
    outstanding_amount: float,
    rng: random.Random,
) -> dict[str, Any]:
    tier = classify_tier(risk_score)
    probability, timeline = RECOVERY_OUTLOOK[tier]

    return {
        "overall_score": risk_score,
        "factors": [
            {"factor": "Payment History", "score": payment_history_score(days_overdue), "impact": "High"},
            {"factor": "Outstanding Amount", "score": outstanding_amount_score(outstanding_amount), "impact": "High"},
            {"factor": "Communication Response", "score": communication_response_score(rng), "impact": "Medium"},
            {"factor": "Financial Stability", "score": FINANCIAL_STABILITY_SCORES[tier], "impact": "High"},
        ],
        "probability_of_recovery": probability,
        "expected_recovery_time": timeline,
    }


def generate_recommended_actions(risk_score: int) -> list[dict[str, str]]:
    return [a.as_dict() for a in RECOMMENDED_ACTIONS[classify_tier(risk_score)]]


def confidence_score(rng: random.Random) -> int:
    return CONFIDENCE_BASE + rng.randint(0, CONFIDENCE_SPREAD)


def generate_insight(
    risk_score: int,
    days_overdue: int,
    outstanding_amount: float,
    rng: random.Random,
) -> CustomerInsight:
    """
    Full analysis payload for one customer. Structure depends only on the tier
    and the two conditional lines; the random draws happen in a fixed order
    (communication factor, then confidence) so a seeded generator reproduces them.
    """
    return CustomerInsight(
        ai_insights=generate_ai_insights(risk_score, days_overdue, outstanding_amount),
        risk_assessment=generate_risk_assessment(risk_score, days_overdue, outstanding_amount, rng),
        recommended_actions=generate_recommended_actions(risk_score),
        confidence_score=confidence_score(rng),
    )
