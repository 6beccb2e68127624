"""
Record store — the pipeline's only I/O boundary.

The pipeline talks to the PortfolioStore protocol; SqlAlchemyPortfolioStore is
the production implementation over an AsyncSession. Every SQLAlchemy failure
is re-raised as a single StoreError carrying the driver message. No retries.

Writes are flushed, not committed: the caller owns the transaction so that
one upload (customers + metadata) commits or rolls back as a unit.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StoreError
from app.models.portfolio import AnalysisResult, Customer, UploadedFile

logger = structlog.get_logger()

ORDERINGS = {
    "risk_score desc": (Customer.risk_score.desc(), Customer.created_at),
}


class PortfolioStore(Protocol):
    async def insert_customers(self, batch: Sequence[Customer]) -> int: ...

    async def insert_upload_metadata(self, meta: UploadedFile) -> UploadedFile: ...

    async def query_customers(self, owner_id: str, order_by: str = "risk_score desc") -> list[Customer]: ...

    async def get_customer(self, owner_id: str, customer_id: str) -> Optional[Customer]: ...

    async def insert_analysis_result(self, result: AnalysisResult) -> AnalysisResult: ...

    async def list_analysis_results(self, owner_id: str, customer_id: str) -> list[AnalysisResult]: ...

    async def update_customer_status(self, customer: Customer, status: str) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class SqlAlchemyPortfolioStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _flush(self, operation: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation=operation, error=str(e))
            raise StoreError(operation, str(e)) from e

    async def insert_customers(self, batch: Sequence[Customer]) -> int:
        self.session.add_all(batch)
        await self._flush("insert_customers")
        return len(batch)

    async def insert_upload_metadata(self, meta: UploadedFile) -> UploadedFile:
        self.session.add(meta)
        await self._flush("insert_upload_metadata")
        return meta

    async def query_customers(self, owner_id: str, order_by: str = "risk_score desc") -> list[Customer]:
        if order_by not in ORDERINGS:
            raise ValueError(f"Unsupported ordering '{order_by}'")
        stmt = (
            select(Customer)
            .where(Customer.owner_id == owner_id)
            .order_by(*ORDERINGS[order_by])
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation="query_customers", error=str(e))
            raise StoreError("query_customers", str(e)) from e
        return list(result.scalars().all())

    async def get_customer(self, owner_id: str, customer_id: str) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.id == customer_id, Customer.owner_id == owner_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation="get_customer", error=str(e))
            raise StoreError("get_customer", str(e)) from e
        return result.scalar_one_or_none()

    async def insert_analysis_result(self, result: AnalysisResult) -> AnalysisResult:
        self.session.add(result)
        await self._flush("insert_analysis_result")
        return result

    async def list_analysis_results(self, owner_id: str, customer_id: str) -> list[AnalysisResult]:
        stmt = (
            select(AnalysisResult)
            .where(AnalysisResult.owner_id == owner_id, AnalysisResult.customer_id == customer_id)
            .order_by(AnalysisResult.created_at.desc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation="list_analysis_results", error=str(e))
            raise StoreError("list_analysis_results", str(e)) from e
        return list(result.scalars().all())

    async def update_customer_status(self, customer: Customer, status: str) -> None:
        customer.status = status
        await self._flush("update_customer_status")

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation="commit", error=str(e))
            await self.session.rollback()
            raise StoreError("commit", str(e)) from e

    async def rollback(self) -> None:
        await self.session.rollback()
