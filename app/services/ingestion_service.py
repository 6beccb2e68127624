"""
Upload ingestion — file → parsed rows → mapped → scored → one bulk insert.

Steps:
  1. Reject wrong type / oversized / undecodable files (before parsing)
  2. Parse + map + score every row in-process (CPU only, no I/O)
  3. Insert the whole batch, then the upload metadata, in ONE transaction
  4. Commit; any store failure rolls back and surfaces as a single StoreError

Row-level problems never fail the upload: short rows are skipped, unparsable
numbers become 0. Both are counted in the IngestionReport.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from app.core import metrics
from app.core.errors import FileReadError, FileTooLargeError, StoreError, UnsupportedFileTypeError
from app.ingestion.field_mapper import FieldMapper
from app.ingestion.parser import parse_records
from app.models.portfolio import Customer, UploadedFile
from app.schemas.portfolio import FlaggedRow, IngestionReport
from app.scoring.risk import score_customer
from app.services.store import PortfolioStore

logger = structlog.get_logger()

CSV_CONTENT_TYPE = "text/csv"
CSV_EXTENSION = ".csv"
STATUS_COMPLETED = "completed"


@dataclass
class ScoredBatch:
    customers: list[Customer]
    report: IngestionReport


@dataclass
class UploadOutcome:
    upload: UploadedFile
    report: IngestionReport

    @property
    def message(self) -> str:
        return f"Successfully uploaded {self.report.inserted_count} customer records!"


# ═══════════════════════════════════════════════════════════════
# 1. File boundary checks
# ═══════════════════════════════════════════════════════════════

def is_csv(file_name: str, content_type: Optional[str]) -> bool:
    return content_type == CSV_CONTENT_TYPE or (file_name or "").lower().endswith(CSV_EXTENSION)


def validate_upload(file_name: str, content_type: Optional[str], size_bytes: int, max_bytes: int) -> None:
    if not is_csv(file_name, content_type):
        raise UnsupportedFileTypeError(file_name, content_type)
    if size_bytes > max_bytes:
        raise FileTooLargeError(size_bytes, max_bytes)


def decode_content(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FileReadError(f"File is not valid UTF-8 text: {e.reason} at byte {e.start}") from e


# ═══════════════════════════════════════════════════════════════
# 2. Parse → map → score (pure)
# ═══════════════════════════════════════════════════════════════

def build_batch(
    text: str,
    owner_id: str,
    rng: random.Random,
    upload_id: Optional[str] = None,
) -> ScoredBatch:
    parsed = parse_records(text)
    mapper = FieldMapper(parsed.headers)

    customers: list[Customer] = []
    flagged: list[FlaggedRow] = []
    field_defaults = 0

    for row in parsed.rows:
        candidate = mapper.map_row(row, owner_id)
        result = score_customer(candidate.outstanding_amount, candidate.days_overdue, rng)

        if candidate.needs_review:
            field_defaults += len(candidate.defaulted_fields)
            flagged.append(FlaggedRow(
                row_index=candidate.row_index,
                name=candidate.name,
                defaulted_fields=list(candidate.defaulted_fields),
            ))

        customers.append(Customer(
            id=str(uuid.uuid4()),
            owner_id=candidate.owner_id,
            upload_id=upload_id,
            name=candidate.name,
            email=candidate.email,
            phone=candidate.phone,
            outstanding_amount=candidate.outstanding_amount,
            days_overdue=candidate.days_overdue,
            risk_score=result.risk_score,
            status=result.status.value,
        ))

    report = IngestionReport(
        inserted_count=len(customers),
        skipped_count=parsed.skipped_row_count,
        field_default_count=field_defaults,
        flagged_rows=flagged,
    )
    return ScoredBatch(customers=customers, report=report)


# ═══════════════════════════════════════════════════════════════
# 3 + 4. Persist
# ═══════════════════════════════════════════════════════════════

async def ingest_upload(
    store: PortfolioStore,
    *,
    file_name: str,
    content_type: Optional[str],
    raw: bytes,
    owner_id: str,
    rng: random.Random,
    max_bytes: int,
) -> UploadOutcome:
    """
    Main entry point for one uploaded file.
    """
    validate_upload(file_name, content_type, len(raw), max_bytes)
    text = decode_content(raw)

    upload_id = str(uuid.uuid4())
    batch = build_batch(text, owner_id, rng, upload_id=upload_id)

    upload = UploadedFile(
        id=upload_id,
        owner_id=owner_id,
        file_name=file_name,
        file_type=content_type,
        processing_status=STATUS_COMPLETED,
        records_processed=batch.report.inserted_count,
        skipped_rows=batch.report.skipped_count,
        defaulted_fields=batch.report.field_default_count,
    )

    try:
        await store.insert_customers(batch.customers)
        await store.insert_upload_metadata(upload)
        await store.commit()
    except StoreError:
        await store.rollback()
        metrics.uploads_total.labels(outcome="store_error").inc()
        raise

    metrics.uploads_total.labels(outcome="completed").inc()
    metrics.records_ingested_total.inc(batch.report.inserted_count)
    metrics.rows_skipped_total.inc(batch.report.skipped_count)
    for customer in batch.customers:
        metrics.risk_score_distribution.observe(customer.risk_score)
    for flagged in batch.report.flagged_rows:
        for field_name in flagged.defaulted_fields:
            metrics.fields_defaulted_total.labels(field=field_name).inc()

    logger.info(
        "upload_ingested",
        upload_id=upload_id,
        owner_id=owner_id,
        file_name=file_name,
        inserted=batch.report.inserted_count,
        skipped=batch.report.skipped_count,
        field_defaults=batch.report.field_default_count,
    )

    return UploadOutcome(upload=upload, report=batch.report)
