"""
Persistent portfolio tables.

  customers         — one row per uploaded account (scored at upload time)
  analysis_results  — one row per insight run, immutable, many per customer
  uploaded_files    — one row per ingested file
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Integer, DateTime, JSON, Index
from sqlalchemy.orm import DeclarativeBase


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(100), nullable=False, index=True)
    upload_id = Column(String(36), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    outstanding_amount = Column(Float, nullable=False, default=0.0)
    days_overdue = Column(Integer, nullable=False, default=0)

    # ── Derived at upload; status is a snapshot (see reclassify) ──
    risk_score = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_customers_owner_risk", "owner_id", "risk_score"),
    )

    def __repr__(self):
        return f"<Customer {self.id} score={self.risk_score} status={self.status}>"


class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(100), nullable=False, index=True)
    customer_id = Column(String(36), nullable=True, index=True)  # weak reference

    analysis_type = Column(String(50), nullable=False)
    ai_insights = Column(JSON, nullable=False)
    risk_assessment = Column(JSON, nullable=False)
    recommended_actions = Column(JSON, nullable=False)
    confidence_score = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<AnalysisResult {self.id} customer={self.customer_id} confidence={self.confidence_score}>"


class UploadedFile(Base):
    __tablename__ = "uploaded_files"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(100), nullable=False, index=True)

    file_name = Column(String(255), nullable=False)
    file_type = Column(String(100), nullable=True)
    processing_status = Column(String(20), nullable=False)
    records_processed = Column(Integer, nullable=False, default=0)
    skipped_rows = Column(Integer, nullable=False, default=0)
    defaulted_fields = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<UploadedFile {self.id} {self.file_name} records={self.records_processed}>"
