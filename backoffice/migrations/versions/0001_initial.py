"""Initial back-office schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _pg_enum(name: str, *values: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


user_role = _pg_enum("user_role", "superadmin", "admin", "manager", "supervisor", "employee")
alert_severity = _pg_enum("alert_severity", "low", "medium", "high", "critical")
alert_status = _pg_enum("alert_status", "open", "in-progress", "resolved")
attendance_status = _pg_enum("attendance_status", "present", "absent", "half-day", "leave")
roster_type = _pg_enum("roster_type", "daily", "weekly", "fortnightly", "monthly")
roster_creator = _pg_enum("roster_creator", "superadmin", "admin")
invoice_creator = _pg_enum("invoice_creator", "superadmin", "admin")
client_status = _pg_enum("client_status", "active", "inactive")
lead_source = _pg_enum(
    "lead_source",
    "Website",
    "Referral",
    "Cold Call",
    "Social Media",
    "Email Campaign",
    "Trade Show",
)
lead_status = _pg_enum(
    "lead_status",
    "new",
    "contacted",
    "qualified",
    "proposal",
    "negotiation",
    "closed-won",
    "closed-lost",
)
communication_type = _pg_enum("communication_type", "call", "email", "meeting", "demo")
invoice_type = _pg_enum("invoice_type", "perform", "tax")
invoice_status = _pg_enum("invoice_status", "pending", "paid", "overdue")
expense_status = _pg_enum("expense_status", "pending", "approved", "rejected")
expense_type = _pg_enum("expense_type", "operational", "office", "other")
payment_method = _pg_enum(
    "payment_method",
    "Bank Transfer",
    "Credit Card",
    "UPI",
    "Cash",
    "Cheque",
    "Online Payment",
)
leave_type = _pg_enum("leave_type", "annual", "sick", "casual")
leave_status = _pg_enum("leave_status", "pending", "approved", "rejected")
audit_actor_type = _pg_enum(
    "audit_actor_type",
    "superadmin",
    "admin",
    "manager",
    "supervisor",
    "employee",
    "system",
)

ALL_ENUMS = (
    user_role,
    alert_severity,
    alert_status,
    attendance_status,
    roster_type,
    roster_creator,
    invoice_creator,
    client_status,
    lead_source,
    lead_status,
    communication_type,
    invoice_type,
    invoice_status,
    expense_status,
    expense_type,
    payment_method,
    leave_type,
    leave_status,
    audit_actor_type,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def _jsonb(name: str, default: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text(f"'{default}'::jsonb"),
    )


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ALL_ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="employee"),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("site", sa.String(length=255), nullable=False, server_default="Mumbai Office"),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("join_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("severity", alert_severity, nullable=False, server_default="medium"),
        sa.Column("status", alert_status, nullable=False, server_default="open"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("reported_by", sa.String(length=255), nullable=False),
        sa.Column("site", sa.String(length=255), nullable=False),
        _jsonb("photos", "[]"),
        sa.Column("assigned_to", sa.String(length=255), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_alerts_site", "alerts", ["site"], unique=False)
    op.create_index("ix_alerts_status_severity", "alerts", ["status", "severity"], unique=False)

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("break_time", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", attendance_status, nullable=False, server_default="present"),
        sa.Column("is_checked_in", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_on_break", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("supervisor_id", sa.String(length=64), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_day"),
        sa.CheckConstraint("total_hours >= 0", name="ck_attendance_total_hours_non_negative"),
        sa.CheckConstraint("break_time >= 0", name="ck_attendance_break_time_non_negative"),
    )
    op.create_index("ix_attendance_records_employee_id", "attendance_records", ["employee_id"], unique=False)
    op.create_index("ix_attendance_records_date", "attendance_records", ["date"], unique=False)
    op.create_index("ix_attendance_records_status", "attendance_records", ["status"], unique=False)
    op.create_index("ix_attendance_records_supervisor_id", "attendance_records", ["supervisor_id"], unique=False)

    op.create_table(
        "manager_attendance",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("manager_id", sa.String(length=64), nullable=False),
        sa.Column("manager_name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("break_end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("break_time", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_checked_in", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_on_break", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("has_checked_out_today", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.UniqueConstraint("manager_id", "date", name="uq_manager_attendance_manager_day"),
        sa.CheckConstraint("total_hours >= 0", name="ck_manager_attendance_total_hours_non_negative"),
        sa.CheckConstraint("break_time >= 0", name="ck_manager_attendance_break_time_non_negative"),
    )
    op.create_index("ix_manager_attendance_manager_id", "manager_attendance", ["manager_id"], unique=False)
    op.create_index("ix_manager_attendance_date", "manager_attendance", ["date"], unique=False)

    op.create_table(
        "manager_activities",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("manager_attendance_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("details", sa.Text(), nullable=False, server_default=""),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["manager_attendance_id"], ["manager_attendance.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_manager_activities_manager_attendance_id",
        "manager_activities",
        ["manager_attendance_id"],
        unique=False,
    )

    op.create_table(
        "roster_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=False),
        sa.Column("designation", sa.String(length=255), nullable=False),
        sa.Column("shift", sa.String(length=100), nullable=False),
        sa.Column("shift_timing", sa.String(length=100), nullable=False),
        sa.Column("assigned_task", sa.String(length=500), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("remark", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", roster_type, nullable=False),
        sa.Column("site_client", sa.String(length=255), nullable=False),
        sa.Column("supervisor", sa.String(length=255), nullable=False),
        sa.Column("created_by", roster_creator, nullable=False, server_default="superadmin"),
        *_timestamps(),
        sa.CheckConstraint("hours >= 0 AND hours <= 24", name="ck_roster_entries_hours_range"),
    )
    op.create_index("ix_roster_entries_date_employee", "roster_entries", ["date", "employee_id"], unique=False)
    op.create_index("ix_roster_entries_type_date", "roster_entries", ["type", "date"], unique=False)
    op.create_index("ix_roster_entries_created_by", "roster_entries", ["created_by"], unique=False)

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("pincode", sa.String(length=20), nullable=True),
        sa.Column("gst_number", sa.String(length=32), nullable=True),
        sa.Column("contact_person", sa.String(length=255), nullable=True),
        sa.Column("contact_person_phone", sa.String(length=50), nullable=True),
        sa.Column("value", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("industry", sa.String(length=255), nullable=False, server_default="IT Services"),
        sa.Column("status", client_status, nullable=False, server_default="active"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_clients_email"),
    )
    op.create_index("ix_clients_name", "clients", ["name"], unique=False)
    op.create_index("ix_clients_company", "clients", ["company"], unique=False)
    op.create_index("ix_clients_status", "clients", ["status"], unique=False)

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("source", lead_source, nullable=False),
        sa.Column("status", lead_status, nullable=False, server_default="new"),
        sa.Column("value", sa.String(length=100), nullable=False),
        sa.Column("assigned_to", sa.String(length=255), nullable=False),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "communications",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("type", communication_type, nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("follow_up_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_communications_client_id", "communications", ["client_id"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("invoice_id", sa.String(length=64), nullable=False),
        sa.Column("invoice_number", sa.String(length=64), nullable=False),
        sa.Column("voucher_no", sa.String(length=64), nullable=True),
        sa.Column("invoice_type", invoice_type, nullable=False, server_default="perform"),
        sa.Column("status", invoice_status, nullable=False, server_default="pending"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("created_by", invoice_creator, nullable=False, server_default="superadmin"),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        _jsonb("shared_with", "[]"),
        sa.Column("is_visible_to_admin", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("client", sa.String(length=255), nullable=False),
        sa.Column("client_email", sa.String(length=255), nullable=True),
        sa.Column("client_address", sa.String(length=500), nullable=True),
        sa.Column("site", sa.String(length=255), nullable=True),
        sa.Column("service_type", sa.String(length=255), nullable=True),
        sa.Column("payment_terms", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _jsonb("items", "[]"),
        sa.Column("subtotal", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tax", sa.Float(), nullable=False, server_default="0"),
        sa.Column("discount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("round_up", sa.Float(), nullable=False, server_default="0"),
        sa.Column("management_fees_percent", sa.Float(), nullable=True),
        sa.Column("management_fees_amount", sa.Float(), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_invoices_invoice_id", "invoices", ["invoice_id"], unique=True)
    op.create_index("ix_invoices_status", "invoices", ["status"], unique=False)
    op.create_index("ix_invoices_user_id", "invoices", ["user_id"], unique=False)

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("expense_id", sa.String(length=64), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("base_amount", sa.Float(), nullable=False),
        sa.Column("gst", sa.Float(), nullable=False, server_default="0"),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", expense_status, nullable=False, server_default="pending"),
        sa.Column("vendor", sa.String(length=255), nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("site", sa.String(length=255), nullable=False),
        sa.Column("expense_type", expense_type, nullable=False),
        sa.Column("receipt_url", sa.String(length=1024), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=False, server_default="system"),
        *_timestamps(),
    )
    op.create_index("ix_expenses_expense_id", "expenses", ["expense_id"], unique=True)
    op.create_index("ix_expenses_date", "expenses", ["date"], unique=False)
    op.create_index("ix_expenses_status", "expenses", ["status"], unique=False)
    op.create_index("ix_expenses_vendor", "expenses", ["vendor"], unique=False)
    op.create_index("ix_expenses_site", "expenses", ["site"], unique=False)
    op.create_index("ix_expenses_expense_type", "expenses", ["expense_type"], unique=False)

    op.create_table(
        "leaves",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=False),
        sa.Column("contact_number", sa.String(length=50), nullable=False),
        sa.Column("leave_type", leave_type, nullable=False),
        sa.Column("from_date", sa.Date(), nullable=False),
        sa.Column("to_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", leave_status, nullable=False, server_default="pending"),
        sa.Column("applied_by", sa.String(length=255), nullable=False),
        sa.Column("applied_for", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("total_days >= 1", name="ck_leaves_total_days_positive"),
    )
    op.create_index("ix_leaves_employee_id", "leaves", ["employee_id"], unique=False)
    op.create_index("ix_leaves_department", "leaves", ["department"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("ts_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("actor_type", audit_actor_type, nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=255), nullable=True),
        sa.Column("entity_id", sa.String(length=255), nullable=True),
        sa.Column("ip", sa.String(length=128), nullable=True),
        sa.Column("user_agent", sa.String(length=1024), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _jsonb("details", "{}"),
    )
    op.create_index("ix_audit_logs_ts_utc", "audit_logs", ["ts_utc"], unique=False)


def downgrade() -> None:
    for table_name in (
        "audit_logs",
        "leaves",
        "expenses",
        "invoices",
        "communications",
        "leads",
        "clients",
        "roster_entries",
        "manager_activities",
        "manager_attendance",
        "attendance_records",
        "alerts",
        "users",
    ):
        op.drop_table(table_name)

    bind = op.get_bind()
    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(bind, checkfirst=True)
