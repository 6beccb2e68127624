"""
001 — Initial schema: customers, analysis_results, uploaded_files

Revision ID: 001
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(100), nullable=False),
        sa.Column("upload_id", sa.String(36), nullable=True),

        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("outstanding_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("days_overdue", sa.Integer, nullable=False, server_default="0"),

        sa.Column("risk_score", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.CheckConstraint("risk_score BETWEEN 0 AND 100", name="ck_customers_risk_score_range"),
        sa.CheckConstraint(
            "status IN ('high_risk', 'moderate_risk', 'low_risk')",
            name="ck_customers_status",
        ),
    )
    op.create_index("ix_customers_owner_id", "customers", ["owner_id"])
    op.create_index("ix_customers_upload_id", "customers", ["upload_id"])
    op.create_index("ix_customers_owner_risk", "customers", ["owner_id", "risk_score"])

    op.create_table(
        "analysis_results",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(100), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=True),

        sa.Column("analysis_type", sa.String(50), nullable=False),
        sa.Column("ai_insights", sa.JSON, nullable=False),
        sa.Column("risk_assessment", sa.JSON, nullable=False),
        sa.Column("recommended_actions", sa.JSON, nullable=False),
        sa.Column("confidence_score", sa.Integer, nullable=False),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_analysis_results_owner_id", "analysis_results", ["owner_id"])
    op.create_index("ix_analysis_results_customer_id", "analysis_results", ["customer_id"])

    op.create_table(
        "uploaded_files",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(100), nullable=False),

        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=True),
        sa.Column("processing_status", sa.String(20), nullable=False),
        sa.Column("records_processed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("skipped_rows", sa.Integer, nullable=False, server_default="0"),
        sa.Column("defaulted_fields", sa.Integer, nullable=False, server_default="0"),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_uploaded_files_owner_id", "uploaded_files", ["owner_id"])


def downgrade() -> None:
    op.drop_table("uploaded_files")
    op.drop_table("analysis_results")
    op.drop_table("customers")
