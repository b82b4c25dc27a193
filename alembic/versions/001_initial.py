"""initial schema: organizations, campaigns, evidences, reports, transparency scores

Revision ID: 001
Revises:
Create Date: 2026-10-19

Transparency score record (one per organization, optimistic version column)
and its append-only history ledger, plus the collaborator tables the engine reads.
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("legal_name", sa.String(length=255), nullable=False),
        sa.Column("logo_url", sa.String(length=2048), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("collected_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("evidence_deadline_days", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_organization_id", "campaigns", ["organization_id"])
    op.create_index("ix_campaigns_status", "campaigns", ["status"])

    op.create_table(
        "evidences",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("campaign_id", sa.Uuid(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount_spent", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_evidences_campaign_status", "evidences", ["campaign_id", "status"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("campaign_id", sa.Uuid(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("resolution_note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_reports_organization_status", "reports", ["organization_id", "status"]
    )

    op.create_table(
        "transparency_scores",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("current_score", sa.Numeric(5, 2), nullable=False),
        sa.Column("evidence_score", sa.Numeric(7, 2), nullable=False),
        sa.Column("timeliness_score", sa.Numeric(7, 2), nullable=False),
        sa.Column("report_score", sa.Numeric(7, 2), nullable=False),
        sa.Column("total_campaigns", sa.Integer(), nullable=False),
        sa.Column("completed_campaigns", sa.Integer(), nullable=False),
        sa.Column("total_evidences", sa.Integer(), nullable=False),
        sa.Column("approved_evidences", sa.Integer(), nullable=False),
        sa.Column("rejected_evidences", sa.Integer(), nullable=False),
        sa.Column("on_time_reports", sa.Integer(), nullable=False),
        sa.Column("late_reports", sa.Integer(), nullable=False),
        sa.Column("last_calculated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "current_score >= 0 AND current_score <= 100",
            name="ck_transparency_scores_current_score_range",
        ),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", name="uq_transparency_scores_organization_id"),
    )

    op.create_table(
        "transparency_score_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("previous_score", sa.Numeric(5, 2), nullable=False),
        sa.Column("new_score", sa.Numeric(5, 2), nullable=False),
        sa.Column("change_amount", sa.Numeric(5, 2), nullable=False),
        sa.Column("change_reason", sa.String(length=64), nullable=False),
        sa.Column("related_entity_type", sa.String(length=32), nullable=True),
        sa.Column("related_entity_id", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_transparency_score_history_org_created",
        "transparency_score_history",
        ["organization_id", "created_at"],
    )
    op.create_index(
        "ix_transparency_score_history_related",
        "transparency_score_history",
        ["related_entity_type", "related_entity_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_transparency_score_history_related", table_name="transparency_score_history"
    )
    op.drop_index(
        "ix_transparency_score_history_org_created", table_name="transparency_score_history"
    )
    op.drop_table("transparency_score_history")
    op.drop_table("transparency_scores")
    op.drop_index("ix_reports_organization_status", table_name="reports")
    op.drop_table("reports")
    op.drop_index("ix_evidences_campaign_status", table_name="evidences")
    op.drop_table("evidences")
    op.drop_index("ix_campaigns_status", table_name="campaigns")
    op.drop_index("ix_campaigns_organization_id", table_name="campaigns")
    op.drop_table("campaigns")
    op.drop_table("organizations")
