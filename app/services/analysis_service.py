"""
Customer analysis — runs the Insight Generator for one stored customer and
stores the outcome as a NEW AnalysisResult row (results are never updated).

Depends only on the customer row it is given, so analyses for different
customers can run concurrently.
"""
from __future__ import annotations

import random

import structlog

from app.core import metrics
from app.core.errors import CustomerNotFoundError, StoreError
from app.models.portfolio import AnalysisResult, Customer
from app.scoring.insights import generate_insight
from app.services.store import PortfolioStore

logger = structlog.get_logger()


def build_analysis(customer: Customer, owner_id: str, rng: random.Random) -> AnalysisResult:
    insight = generate_insight(
        customer.risk_score,
        customer.days_overdue,
        float(customer.outstanding_amount or 0),
        rng,
    )
    return AnalysisResult(
        owner_id=owner_id,
        customer_id=customer.id,
        analysis_type=insight.analysis_type,
        ai_insights=insight.ai_insights,
        risk_assessment=insight.risk_assessment,
        recommended_actions=insight.recommended_actions,
        confidence_score=insight.confidence_score,
    )


async def run_analysis(
    store: PortfolioStore,
    owner_id: str,
    customer_id: str,
    rng: random.Random,
) -> AnalysisResult:
    customer = await store.get_customer(owner_id, customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)

    analysis = build_analysis(customer, owner_id, rng)

    try:
        stored = await store.insert_analysis_result(analysis)
        await store.commit()
    except StoreError:
        await store.rollback()
        metrics.analyses_total.labels(status="store_error").inc()
        raise

    metrics.analyses_total.labels(status="completed").inc()
    logger.info(
        "customer_analysis_complete",
        analysis_id=stored.id,
        customer_id=customer_id,
        risk_score=customer.risk_score,
        confidence_score=stored.confidence_score,
    )
    return stored


async def list_analyses(store: PortfolioStore, owner_id: str, customer_id: str) -> list[AnalysisResult]:
    if await store.get_customer(owner_id, customer_id) is None:
        raise CustomerNotFoundError(customer_id)
    return await store.list_analysis_results(owner_id, customer_id)
