"""
Portfolio read side + explicit reclassification.

Dashboard and analytics load the owner's working set once (ordered by risk
score, highest first) and hand it to the pure aggregator.
"""
from __future__ import annotations

from typing import Optional

import structlog

from app.core.errors import StoreError
from app.models.portfolio import Customer
from app.schemas.portfolio import BucketCount, CustomerResponse, PortfolioSummary, TierBreakdown
from app.scoring.portfolio import (
    filter_customers,
    portfolio_recommendations,
    summarize_portfolio,
    current_tier,
)
from app.scoring.risk import STATUS_LABELS, RiskStatus
from app.services.store import PortfolioStore

logger = structlog.get_logger()


async def list_customers(
    store: PortfolioStore,
    owner_id: str,
    search: str = "",
    status: Optional[str] = None,
) -> list[Customer]:
    customers = await store.query_customers(owner_id, order_by="risk_score desc")
    return filter_customers(customers, search=search, status=status)


async def load_summary(store: PortfolioStore, owner_id: str, top_limit: int) -> PortfolioSummary:
    customers = await store.query_customers(owner_id, order_by="risk_score desc")
    stats = summarize_portfolio(customers, top_limit=top_limit)

    tier_counts = [
        (RiskStatus.HIGH_RISK, stats.high_risk_count),
        (RiskStatus.MODERATE_RISK, stats.moderate_risk_count),
        (RiskStatus.LOW_RISK, stats.low_risk_count),
    ]

    return PortfolioSummary(
        total_count=stats.total_count,
        high_risk_count=stats.high_risk_count,
        moderate_risk_count=stats.moderate_risk_count,
        low_risk_count=stats.low_risk_count,
        total_outstanding=stats.total_outstanding,
        avg_risk_score=stats.avg_risk_score,
        avg_days_overdue=stats.avg_days_overdue,
        tiers=[
            TierBreakdown(
                label=STATUS_LABELS[status],
                status=status,
                count=count,
                percentage=stats.tier_percentage(count),
            )
            for status, count in tier_counts
        ],
        overdue_distribution=[BucketCount(label=b.label, count=b.count) for b in stats.overdue_distribution],
        amount_distribution=[BucketCount(label=b.label, count=b.count) for b in stats.amount_distribution],
        top_accounts=[CustomerResponse.model_validate(c) for c in stats.top_accounts],
        recommendations=portfolio_recommendations(stats),
    )


async def reclassify_customers(store: PortfolioStore, owner_id: str) -> tuple[int, int]:
    """
    Re-derive status from the CURRENT risk score for every customer of an owner.

    Status is otherwise a snapshot taken at upload time; this is the only
    operation that refreshes it. Returns (examined, changed).
    """
    customers = await store.query_customers(owner_id)
    changed = 0
    try:
        for customer in customers:
            tier = current_tier(customer).value
            if customer.status != tier:
                await store.update_customer_status(customer, tier)
                changed += 1
        await store.commit()
    except StoreError:
        await store.rollback()
        raise

    logger.info("customers_reclassified", owner_id=owner_id, examined=len(customers), changed=changed)
    return len(customers), changed
