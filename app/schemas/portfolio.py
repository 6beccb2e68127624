"""
Response payloads returned to the portfolio UI.

The UI renders: customer list (status + score), per-customer analysis,
dashboard summary, and the upload outcome message.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.scoring.risk import RiskStatus, risk_color, risk_label


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    upload_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    outstanding_amount: float = Field(ge=0)
    days_overdue: int = Field(ge=0)
    risk_score: int = Field(ge=0, le=100)
    status: RiskStatus = Field(description="Snapshot taken when the record was scored")
    created_at: datetime
    updated_at: datetime


class CustomerListItem(CustomerResponse):
    """Customer row plus the presentation hints derived from the live score."""
    risk_label: str
    risk_color: str

    @classmethod
    def from_customer(cls, customer: Any) -> "CustomerListItem":
        base = CustomerResponse.model_validate(customer)
        return cls(
            **base.model_dump(),
            risk_label=risk_label(base.risk_score),
            risk_color=risk_color(base.risk_score),
        )


class FlaggedRow(BaseModel):
    """A row whose numeric fields were defaulted to 0 and should be reviewed."""
    row_index: int
    name: str
    defaulted_fields: list[str]


class IngestionReport(BaseModel):
    inserted_count: int
    skipped_count: int = Field(description="Rows dropped for having fewer cells than the header")
    field_default_count: int = Field(description="Numeric cells that could not be parsed and became 0")
    flagged_rows: list[FlaggedRow] = []


class UploadResponse(BaseModel):
    upload_id: str
    file_name: str
    message: str
    report: IngestionReport


class AnalysisResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    customer_id: Optional[str] = None
    analysis_type: str
    ai_insights: dict[str, Any]
    risk_assessment: dict[str, Any]
    recommended_actions: list[dict[str, Any]]
    confidence_score: int = Field(ge=85, le=94)
    created_at: datetime


class BucketCount(BaseModel):
    label: str
    count: int


class TierBreakdown(BaseModel):
    label: str
    status: RiskStatus
    count: int
    percentage: float


class PortfolioSummary(BaseModel):
    total_count: int
    high_risk_count: int
    moderate_risk_count: int
    low_risk_count: int
    total_outstanding: float
    avg_risk_score: float
    avg_days_overdue: float
    tiers: list[TierBreakdown]
    overdue_distribution: list[BucketCount]
    amount_distribution: list[BucketCount]
    top_accounts: list[CustomerResponse]
    recommendations: list[str]


class ReclassifyResponse(BaseModel):
    examined_count: int
    changed_count: int
