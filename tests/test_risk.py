"""
Unit tests for the risk scorer and tier classifier.
"""
import random

from app.scoring.risk import (
    RiskStatus,
    amount_contribution,
    classify_tier,
    overdue_contribution,
    risk_color,
    risk_label,
    score_customer,
)
from tests.helpers import FixedRandom, MaxRandom


class TestOverdueContribution:
    def test_brackets(self):
        assert overdue_contribution(0) == 0
        assert overdue_contribution(1) == 10
        assert overdue_contribution(30) == 10
        assert overdue_contribution(31) == 20
        assert overdue_contribution(60) == 20
        assert overdue_contribution(61) == 30
        assert overdue_contribution(90) == 30
        assert overdue_contribution(91) == 40

    def test_not_cumulative(self):
        assert overdue_contribution(1_000_000) == 40


class TestAmountContribution:
    def test_brackets(self):
        assert amount_contribution(0) == 0
        assert amount_contribution(1_000) == 0
        assert amount_contribution(1_000.01) == 10
        assert amount_contribution(5_000) == 10
        assert amount_contribution(5_001) == 20
        assert amount_contribution(10_000) == 20
        assert amount_contribution(10_001) == 30

    def test_not_cumulative(self):
        assert amount_contribution(1e9) == 30


class TestScoreCustomer:
    def test_zero_inputs_only_random(self):
        r = score_customer(0, 0, FixedRandom(17))
        assert r.deterministic_points == 0
        assert r.risk_score == 17
        assert r.status == RiskStatus.LOW_RISK

    def test_random_term_bounds(self):
        assert score_customer(0, 0, FixedRandom(0)).random_points == 0
        assert score_customer(0, 0, MaxRandom()).random_points == 29

    def test_maximum_is_99(self):
        r = score_customer(1e9, 1_000_000, MaxRandom())
        assert r.risk_score == 99
        assert r.status == RiskStatus.HIGH_RISK

    def test_always_within_bounds(self):
        rng = random.Random(1234)
        for amount in (0, 999, 1_001, 5_001, 10_001, 1e9):
            for days in (0, 1, 31, 61, 91, 1_000_000):
                r = score_customer(amount, days, rng)
                assert 0 <= r.risk_score <= 100

    def test_seeded_generator_is_reproducible(self):
        a = [score_customer(6_000, 45, random.Random(42)).risk_score for _ in range(3)]
        assert len(set(a)) == 1


class TestClassifyTier:
    def test_exhaustive_no_gap_no_overlap(self):
        for score in range(0, 101):
            tier = classify_tier(score)
            if score >= 70:
                assert tier == RiskStatus.HIGH_RISK
            elif score >= 40:
                assert tier == RiskStatus.MODERATE_RISK
            else:
                assert tier == RiskStatus.LOW_RISK

    def test_boundaries(self):
        assert classify_tier(39) == RiskStatus.LOW_RISK
        assert classify_tier(40) == RiskStatus.MODERATE_RISK
        assert classify_tier(69) == RiskStatus.MODERATE_RISK
        assert classify_tier(70) == RiskStatus.HIGH_RISK


class TestPresentationHelpers:
    def test_labels_follow_tiers(self):
        assert risk_label(85) == "High Risk"
        assert risk_label(55) == "Moderate"
        assert risk_label(10) == "Low Risk"

    def test_colors_follow_tiers(self):
        assert risk_color(70) == "#ef4444"
        assert risk_color(40) == "#f59e0b"
        assert risk_color(39) == "#10b981"
