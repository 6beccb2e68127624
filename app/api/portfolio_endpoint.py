"""
/v1/portfolio — upload, browse, summarise and analyse an owner's portfolio.

POST /uploads                      → ingest one CSV file
GET  /customers                    → list (search + status filter), riskiest first
GET  /customers/{id}               → one customer
POST /customers/{id}/analysis      → generate + store a new analysis
GET  /customers/{id}/analysis      → previous analyses, newest first
POST /customers/reclassify         → refresh status snapshots from current scores
GET  /summary                      → dashboard / analytics aggregates
"""
from __future__ import annotations

import random
from typing import Literal, Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_owner_id
from app.core.config import Settings, get_settings
from app.core.errors import (
    CustomerNotFoundError,
    FileReadError,
    FileTooLargeError,
    StoreError,
    UnsupportedFileTypeError,
)
from app.core import metrics
from app.core.rng import get_rng
from app.models.database import get_db
from app.schemas.portfolio import (
    AnalysisResultResponse,
    CustomerListItem,
    CustomerResponse,
    PortfolioSummary,
    ReclassifyResponse,
    UploadResponse,
)
from app.services import analysis_service, ingestion_service, portfolio_service
from app.services.event_publisher import publish_analysis_completed, publish_upload_completed
from app.services.store import SqlAlchemyPortfolioStore

logger = structlog.get_logger()
router = APIRouter(prefix="/v1/portfolio", tags=["portfolio"])

StatusFilter = Literal["all", "high_risk", "moderate_risk", "low_risk"]


def get_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyPortfolioStore:
    return SqlAlchemyPortfolioStore(db)


async def _read_upload(file: UploadFile) -> bytes:
    try:
        return await file.read()
    except OSError as e:
        raise FileReadError(f"Could not read uploaded file: {e}") from e


def _store_failure(e: StoreError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(e))


@router.post(
    "/uploads",
    response_model=UploadResponse,
    summary="Upload a CSV of customer payment records",
    description="Parses, scores and stores every row. Short rows are skipped; the report says how many.",
)
async def upload_portfolio(
    file: UploadFile = File(...),
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
    rng: random.Random = Depends(get_rng),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    file_name = file.filename or "upload.csv"
    logger.info("upload_started", owner_id=owner_id, file_name=file_name, content_type=file.content_type)

    try:
        if file.size is not None:
            # reject on the declared size before buffering the body
            ingestion_service.validate_upload(
                file_name, file.content_type, file.size, settings.max_upload_bytes
            )
        raw = await _read_upload(file)
        outcome = await ingestion_service.ingest_upload(
            store,
            file_name=file_name,
            content_type=file.content_type,
            raw=raw,
            owner_id=owner_id,
            rng=rng,
            max_bytes=settings.max_upload_bytes,
        )
    except UnsupportedFileTypeError as e:
        metrics.uploads_total.labels(outcome="rejected").inc()
        logger.warning("upload_rejected", file_name=file_name, reason="file_type")
        raise HTTPException(status_code=400, detail=str(e))
    except FileTooLargeError as e:
        metrics.uploads_total.labels(outcome="rejected").inc()
        logger.warning("upload_rejected", file_name=file_name, reason="too_large")
        raise HTTPException(status_code=413, detail=str(e))
    except FileReadError as e:
        metrics.uploads_total.labels(outcome="read_error").inc()
        logger.warning("upload_rejected", file_name=file_name, reason="unreadable")
        raise HTTPException(status_code=422, detail=str(e))
    except StoreError as e:
        logger.error("upload_failed", file_name=file_name, error=str(e))
        raise _store_failure(e)

    await publish_upload_completed(
        outcome.upload.id, owner_id, outcome.report.inserted_count, outcome.report.skipped_count
    )

    return UploadResponse(
        upload_id=outcome.upload.id,
        file_name=file_name,
        message=outcome.message,
        report=outcome.report,
    )


@router.get("/customers", response_model=list[CustomerListItem])
async def list_customers(
    search: str = Query("", description="Matches name / email (case-insensitive) or phone"),
    status: Optional[StatusFilter] = Query(None, description="Stored status snapshot, or \"all\""),
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
) -> list[CustomerListItem]:
    try:
        customers = await portfolio_service.list_customers(
            store, owner_id, search=search, status=status
        )
    except StoreError as e:
        raise _store_failure(e)
    return [CustomerListItem.from_customer(c) for c in customers]


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
) -> CustomerResponse:
    try:
        customer = await store.get_customer(owner_id, customer_id)
    except StoreError as e:
        raise _store_failure(e)
    if customer is None:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
    return CustomerResponse.model_validate(customer)


@router.post("/customers/reclassify", response_model=ReclassifyResponse)
async def reclassify(
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
) -> ReclassifyResponse:
    try:
        examined, changed = await portfolio_service.reclassify_customers(store, owner_id)
    except StoreError as e:
        raise _store_failure(e)
    return ReclassifyResponse(examined_count=examined, changed_count=changed)


@router.post("/customers/{customer_id}/analysis", response_model=AnalysisResultResponse)
async def analyse_customer(
    customer_id: str,
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
    rng: random.Random = Depends(get_rng),
) -> AnalysisResultResponse:
    try:
        analysis = await analysis_service.run_analysis(store, owner_id, customer_id, rng)
    except CustomerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        logger.error("analysis_failed", customer_id=customer_id, error=str(e))
        raise _store_failure(e)

    await publish_analysis_completed(analysis.id, customer_id, analysis.confidence_score)
    return AnalysisResultResponse.model_validate(analysis)


@router.get("/customers/{customer_id}/analysis", response_model=list[AnalysisResultResponse])
async def list_customer_analyses(
    customer_id: str,
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
) -> list[AnalysisResultResponse]:
    try:
        results = await analysis_service.list_analyses(store, owner_id, customer_id)
    except CustomerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise _store_failure(e)
    return [AnalysisResultResponse.model_validate(r) for r in results]


@router.get("/summary", response_model=PortfolioSummary)
async def portfolio_summary(
    owner_id: str = Depends(get_owner_id),
    store: SqlAlchemyPortfolioStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PortfolioSummary:
    try:
        return await portfolio_service.load_summary(store, owner_id, settings.top_accounts_limit)
    except StoreError as e:
        raise _store_failure(e)


@router.get("/health", tags=["health"])
async def health():
    settings = get_settings()
    return {"status": "ok", "service": settings.app_name, "model_version": settings.scoring_model_version}
