from __future__ import annotations

import enum
import datetime as dt
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.db import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Persist the lowercase wire value ("half-day"), not the member name.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class UserRole(str, enum.Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"


class AlertSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class RosterType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


class RosterCreator(str, enum.Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"


class ClientStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class LeadSource(str, enum.Enum):
    WEBSITE = "Website"
    REFERRAL = "Referral"
    COLD_CALL = "Cold Call"
    SOCIAL_MEDIA = "Social Media"
    EMAIL_CAMPAIGN = "Email Campaign"
    TRADE_SHOW = "Trade Show"


class LeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed-won"
    CLOSED_LOST = "closed-lost"


class CommunicationType(str, enum.Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    DEMO = "demo"


class InvoiceType(str, enum.Enum):
    PERFORM = "perform"
    TAX = "tax"


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class ExpenseStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ExpenseType(str, enum.Enum):
    OPERATIONAL = "operational"
    OFFICE = "office"
    OTHER = "other"


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "Bank Transfer"
    CREDIT_CARD = "Credit Card"
    UPI = "UPI"
    CASH = "Cash"
    CHEQUE = "Cheque"
    ONLINE_PAYMENT = "Online Payment"


class LeaveType(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditActorType(str, enum.Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"
    SYSTEM = "system"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=_utcnow,
    )


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        _enum(UserRole, "user_role"),
        nullable=False,
        default=UserRole.EMPLOYEE,
    )
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    site: Mapped[str] = mapped_column(String(255), nullable=False, default="Mumbai Office")
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    join_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)


class Alert(TimestampMixin, Base):
    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_status_severity", "status", "severity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        _enum(AlertSeverity, "alert_severity"),
        nullable=False,
        default=AlertSeverity.MEDIUM,
    )
    status: Mapped[AlertStatus] = mapped_column(
        _enum(AlertStatus, "alert_status"),
        nullable=False,
        default=AlertStatus.OPEN,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    reported_by: Mapped[str] = mapped_column(String(255), nullable=False)
    site: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    photos: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    assigned_to: Mapped[str] = mapped_column(String(255), nullable=False, default="")


class AttendanceRecord(TimestampMixin, Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_day"),
        CheckConstraint("total_hours >= 0", name="ck_attendance_total_hours_non_negative"),
        CheckConstraint("break_time >= 0", name="ck_attendance_break_time_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    break_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    break_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    break_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[AttendanceStatus] = mapped_column(
        _enum(AttendanceStatus, "attendance_status"),
        nullable=False,
        default=AttendanceStatus.PRESENT,
        index=True,
    )
    is_checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_on_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    supervisor_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)


class ManagerAttendance(TimestampMixin, Base):
    __tablename__ = "manager_attendance"
    __table_args__ = (
        UniqueConstraint("manager_id", "date", name="uq_manager_attendance_manager_day"),
        CheckConstraint("total_hours >= 0", name="ck_manager_attendance_total_hours_non_negative"),
        CheckConstraint("break_time >= 0", name="ck_manager_attendance_break_time_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    manager_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    manager_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    break_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    break_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    break_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_on_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_checked_out_today: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    activities: Mapped[list[ManagerActivity]] = relationship(
        back_populates="attendance",
        cascade="all, delete-orphan",
        order_by="ManagerActivity.timestamp",
    )


class ManagerActivity(Base):
    __tablename__ = "manager_activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    manager_attendance_id: Mapped[int] = mapped_column(
        ForeignKey("manager_attendance.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    attendance: Mapped[ManagerAttendance] = relationship(back_populates="activities")


class RosterEntry(TimestampMixin, Base):
    __tablename__ = "roster_entries"
    __table_args__ = (
        Index("ix_roster_entries_date_employee", "date", "employee_id"),
        Index("ix_roster_entries_type_date", "type", "date"),
        CheckConstraint("hours >= 0 AND hours <= 24", name="ck_roster_entries_hours_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(255), nullable=False)
    designation: Mapped[str] = mapped_column(String(255), nullable=False)
    shift: Mapped[str] = mapped_column(String(100), nullable=False)
    shift_timing: Mapped[str] = mapped_column(String(100), nullable=False)
    assigned_task: Mapped[str] = mapped_column(String(500), nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    remark: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[RosterType] = mapped_column(_enum(RosterType, "roster_type"), nullable=False)
    site_client: Mapped[str] = mapped_column(String(255), nullable=False)
    supervisor: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[RosterCreator] = mapped_column(
        _enum(RosterCreator, "roster_creator"),
        nullable=False,
        default=RosterCreator.SUPERADMIN,
        index=True,
    )


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, default="Mumbai")
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gst_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_person_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    value: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    industry: Mapped[str] = mapped_column(String(255), nullable=False, default="IT Services")
    status: Mapped[ClientStatus] = mapped_column(
        _enum(ClientStatus, "client_status"),
        nullable=False,
        default=ClientStatus.ACTIVE,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    communications: Mapped[list[Communication]] = relationship(
        back_populates="client",
        cascade="all, delete-orphan",
    )


class Lead(TimestampMixin, Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    source: Mapped[LeadSource] = mapped_column(_enum(LeadSource, "lead_source"), nullable=False)
    status: Mapped[LeadStatus] = mapped_column(
        _enum(LeadStatus, "lead_status"),
        nullable=False,
        default=LeadStatus.NEW,
    )
    value: Mapped[str] = mapped_column(String(100), nullable=False)
    assigned_to: Mapped[str] = mapped_column(String(255), nullable=False)
    follow_up_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class Communication(Base):
    __tablename__ = "communications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[CommunicationType] = mapped_column(
        _enum(CommunicationType, "communication_type"),
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    follow_up_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    follow_up_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    client: Mapped[Client] = relationship(back_populates="communications")


class Invoice(TimestampMixin, Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False)
    voucher_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    invoice_type: Mapped[InvoiceType] = mapped_column(
        _enum(InvoiceType, "invoice_type"),
        nullable=False,
        default=InvoiceType.PERFORM,
    )
    status: Mapped[InvoiceStatus] = mapped_column(
        _enum(InvoiceStatus, "invoice_status"),
        nullable=False,
        default=InvoiceStatus.PENDING,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    created_by: Mapped[RosterCreator] = mapped_column(
        _enum(RosterCreator, "invoice_creator"),
        nullable=False,
        default=RosterCreator.SUPERADMIN,
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    shared_with: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_visible_to_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    client: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    site: Mapped[str | None] = mapped_column(String(255), nullable=True)
    service_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tax: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    discount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    round_up: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    management_fees_percent: Mapped[float | None] = mapped_column(Float, nullable=True)
    management_fees_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)


class Expense(TimestampMixin, Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    expense_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    base_amount: Mapped[float] = mapped_column(Float, nullable=False)
    gst: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[ExpenseStatus] = mapped_column(
        _enum(ExpenseStatus, "expense_status"),
        nullable=False,
        default=ExpenseStatus.PENDING,
        index=True,
    )
    vendor: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        _enum(PaymentMethod, "payment_method"),
        nullable=False,
    )
    site: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    expense_type: Mapped[ExpenseType] = mapped_column(
        _enum(ExpenseType, "expense_type"),
        nullable=False,
        index=True,
    )
    receipt_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False, default="system")


class LeaveRequest(TimestampMixin, Base):
    __tablename__ = "leaves"
    __table_args__ = (
        CheckConstraint("total_days >= 1", name="ck_leaves_total_days_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_number: Mapped[str] = mapped_column(String(50), nullable=False)
    leave_type: Mapped[LeaveType] = mapped_column(_enum(LeaveType, "leave_type"), nullable=False)
    from_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    to_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        _enum(LeaveStatus, "leave_status"),
        nullable=False,
        default=LeaveStatus.PENDING,
    )
    applied_by: Mapped[str] = mapped_column(String(255), nullable=False)
    applied_for: Mapped[str] = mapped_column(String(255), nullable=False)


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ts_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
    actor_type: Mapped[AuditActorType] = mapped_column(
        _enum(AuditActorType, "audit_actor_type"),
        nullable=False,
    )
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(128), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    details: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
