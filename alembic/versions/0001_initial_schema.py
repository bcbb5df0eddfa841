"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates every table the app uses. Tables that already exist (databases built
by Base.metadata.create_all() before Alembic) are left alone.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def _money(name, **kw):
    return sa.Column(name, sa.Numeric(10, 2), **kw)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(), nullable=False),
            sa.Column("first_name", sa.String(), nullable=True),
            sa.Column("last_name", sa.String(), nullable=True),
            sa.Column("role", sa.String(), nullable=True),
            sa.Column("is_system_admin", sa.Boolean(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_users_id", "users", ["id"])

    if not _table_exists("auth_tokens"):
        op.create_table(
            "auth_tokens",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("token_hash", sa.String(), nullable=False),
            sa.Column("token_type", sa.String(), nullable=True),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_auth_tokens_id", "auth_tokens", ["id"])

    if not _table_exists("organizations"):
        op.create_table(
            "organizations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
            sa.Column("partner_organization", sa.String(), nullable=True),
            sa.Column("phone", sa.String(), nullable=True),
            sa.Column("partner_status", sa.String(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_organizations_id", "organizations", ["id"])

    if not _table_exists("assessments"):
        op.create_table(
            "assessments",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True),
            sa.Column("service_type", sa.String(), nullable=True),
            sa.Column("sales_executive_name", sa.String(), nullable=True),
            sa.Column("sales_executive_email", sa.String(), nullable=True),
            sa.Column("sales_executive_phone", sa.String(), nullable=True),
            sa.Column("customer_company_name", sa.String(), nullable=True),
            sa.Column("customer_contact_name", sa.String(), nullable=True),
            sa.Column("customer_email", sa.String(), nullable=True),
            sa.Column("customer_phone", sa.String(), nullable=True),
            sa.Column("site_address", sa.Text(), nullable=True),
            sa.Column("industry", sa.String(), nullable=True),
            sa.Column("preferred_installation_date", sa.DateTime(), nullable=True),
            sa.Column("building_type", sa.String(), nullable=True),
            sa.Column("coverage_area", sa.Integer(), nullable=True),
            sa.Column("floors", sa.Integer(), nullable=True),
            sa.Column("device_count", sa.Integer(), nullable=True),
            sa.Column("router_count", sa.Integer(), nullable=True),
            sa.Column("total_fleet_size", sa.Integer(), nullable=True),
            sa.Column("power_available", sa.Boolean(), nullable=True),
            sa.Column("ethernet_required", sa.Boolean(), nullable=True),
            sa.Column("ceiling_mount", sa.Boolean(), nullable=True),
            sa.Column("outdoor_coverage", sa.Boolean(), nullable=True),
            sa.Column("network_signal", sa.String(), nullable=True),
            sa.Column("signal_strength", sa.String(), nullable=True),
            sa.Column("connection_usage", sa.String(), nullable=True),
            sa.Column("router_location", sa.String(), nullable=True),
            sa.Column("antenna_cable", sa.String(), nullable=True),
            sa.Column("device_connection_assistance", sa.String(), nullable=True),
            sa.Column("low_signal_antenna_cable", sa.String(), nullable=True),
            sa.Column("antenna_type", sa.String(), nullable=True),
            sa.Column("antenna_installation_location", sa.Text(), nullable=True),
            sa.Column("router_mounting", sa.String(), nullable=True),
            sa.Column("dual_wan_support", sa.String(), nullable=True),
            sa.Column("ceiling_height", sa.String(), nullable=True),
            sa.Column("ceiling_type", sa.String(), nullable=True),
            sa.Column("router_make", sa.String(), nullable=True),
            sa.Column("router_model", sa.String(20), nullable=True),
            sa.Column("cable_footage", sa.String(), nullable=True),
            sa.Column("camera_types", sa.JSON(), nullable=True),
            sa.Column("existing_system_removal", sa.String(), nullable=True),
            sa.Column("interference_sources", sa.Text(), nullable=True),
            sa.Column("special_requirements", sa.Text(), nullable=True),
            _money("total_cost", nullable=True),
            sa.Column("additional_notes", sa.Text(), nullable=True),
            sa.Column("status", sa.String(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_assessments_id", "assessments", ["id"])

    if not _table_exists("quotes"):
        op.create_table(
            "quotes",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("assessment_id", sa.Integer(), sa.ForeignKey("assessments.id"), nullable=False),
            sa.Column("quote_number", sa.String(), nullable=False, unique=True),
            _money("survey_hours", nullable=True),
            _money("survey_cost", nullable=True),
            _money("installation_hours", nullable=True),
            _money("installation_cost", nullable=True),
            _money("configuration_hours", nullable=True),
            _money("configuration_cost", nullable=True),
            _money("labor_hold_hours", nullable=True),
            _money("labor_hold_cost", nullable=True),
            _money("removal_hours", nullable=True),
            _money("removal_cost", nullable=True),
            _money("hardware_cost", nullable=True),
            _money("training_cost", nullable=True),
            _money("total_cost", nullable=False),
            _money("hourly_rate", nullable=True),
            sa.Column("status", sa.String(), nullable=True),
            sa.Column("portal_token", sa.String(), nullable=False, unique=True),
            sa.Column("customer_feedback", sa.Text(), nullable=True),
            sa.Column("pdf_url", sa.String(), nullable=True),
            sa.Column("email_sent", sa.Boolean(), nullable=True),
            sa.Column("approved_at", sa.DateTime(), nullable=True),
            sa.Column("rejected_at", sa.DateTime(), nullable=True),
            sa.Column("expires_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_quotes_id", "quotes", ["id"])

    if not _table_exists("uploaded_files"):
        op.create_table(
            "uploaded_files",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("assessment_id", sa.Integer(), sa.ForeignKey("assessments.id"), nullable=False),
            sa.Column("file_name", sa.String(), nullable=False),
            sa.Column("original_name", sa.String(), nullable=False),
            sa.Column("file_type", sa.String(), nullable=False),
            sa.Column("mime_type", sa.String(), nullable=False),
            sa.Column("file_size", sa.Integer(), nullable=False),
            sa.Column("file_path", sa.String(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_uploaded_files_id", "uploaded_files", ["id"])

    if not _table_exists("partner_invitations"):
        op.create_table(
            "partner_invitations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("recipient_name", sa.String(), nullable=True),
            sa.Column("company_name", sa.String(), nullable=True),
            sa.Column("invited_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("invited_by_name", sa.String(), nullable=True),
            sa.Column("invitation_token", sa.String(), nullable=False, unique=True),
            sa.Column("status", sa.String(), nullable=True),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("accepted_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_partner_invitations_id", "partner_invitations", ["id"])


def downgrade() -> None:
    for table in (
        "partner_invitations", "uploaded_files", "quotes", "assessments",
        "organizations", "auth_tokens", "users",
    ):
        if _table_exists(table):
            op.drop_table(table)
