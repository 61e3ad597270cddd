import datetime as dt
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backoffice.models import (
    AlertSeverity,
    AlertStatus,
    AttendanceStatus,
    ClientStatus,
    CommunicationType,
    ExpenseStatus,
    ExpenseType,
    InvoiceStatus,
    InvoiceType,
    LeadSource,
    LeadStatus,
    LeaveStatus,
    LeaveType,
    PaymentMethod,
    RosterCreator,
    RosterType,
    UserRole,
)
from backoffice.services.common import normalize_ts

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# Auth and users


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=256)


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    name: str
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole
    department: str | None = None
    site: str
    phone: str | None = None
    is_active: bool
    join_date: dt.date | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int
    user: UserRead


class UserCreateRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    role: UserRole = UserRole.EMPLOYEE
    department: str | None = Field(default=None, max_length=255)
    site: str = Field(default="Mumbai Office", max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    is_active: bool = True
    join_date: dt.date | None = None


class UserUpdateRequest(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=100)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    password: str | None = Field(default=None, min_length=8, max_length=128)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    role: UserRole | None = None
    department: str | None = Field(default=None, max_length=255)
    site: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    is_active: bool | None = None
    join_date: dt.date | None = None


# Alerts


class AlertCreate(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    description: str = Field(min_length=10)
    severity: AlertSeverity = AlertSeverity.MEDIUM
    date: dt.date | None = None
    reported_by: str = Field(min_length=1, max_length=255)
    site: str = Field(min_length=1, max_length=255)
    photos: list[str] = Field(default_factory=list, max_length=5)
    assigned_to: str = Field(default="", max_length=255)

    model_config = ConfigDict(str_strip_whitespace=True)


class AlertUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = Field(default=None, min_length=10)
    severity: AlertSeverity | None = None
    status: AlertStatus | None = None
    date: dt.date | None = None
    reported_by: str | None = Field(default=None, min_length=1, max_length=255)
    site: str | None = Field(default=None, min_length=1, max_length=255)
    photos: list[str] | None = Field(default=None, max_length=5)
    assigned_to: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(str_strip_whitespace=True)


class AlertStatusUpdate(BaseModel):
    status: AlertStatus


class AlertRead(BaseModel):
    id: int
    title: str
    description: str
    severity: AlertSeverity
    status: AlertStatus
    date: dt.date
    reported_by: str
    site: str
    photos: list[str]
    assigned_to: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AlertStatsResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    by_severity: dict[str, int]


# Employee attendance


class AttendanceCheckinRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)
    employee_name: str = Field(min_length=1, max_length=255)
    supervisor_id: str | None = Field(default=None, max_length=64)
    department: str | None = Field(default=None, max_length=255)


class AttendanceEmployeeRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)


class AttendanceRead(BaseModel):
    id: int
    employee_id: str
    employee_name: str
    date: dt.date
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    break_start_time: datetime | None = None
    break_end_time: datetime | None = None
    total_hours: float
    break_time: float
    status: AttendanceStatus
    is_checked_in: bool
    is_on_break: bool
    department: str | None = None
    supervisor_id: str | None = None
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttendanceStatusResponse(BaseModel):
    employee_id: str
    date: dt.date
    is_checked_in: bool = False
    is_on_break: bool = False
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    break_start_time: datetime | None = None
    total_hours: float = 0.0
    break_time: float = 0.0
    status: AttendanceStatus | None = None
    record: AttendanceRead | None = None


class AttendancePage(BaseModel):
    items: list[AttendanceRead]
    total: int
    page: int
    limit: int
    pages: int


class AttendanceUpdateRequest(BaseModel):
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    break_time: float | None = Field(default=None, ge=0)
    status: AttendanceStatus | None = None
    department: str | None = Field(default=None, max_length=255)
    supervisor_id: str | None = Field(default=None, max_length=64)
    remarks: str | None = None


class AttendanceManualRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)
    employee_name: str = Field(min_length=1, max_length=255)
    date: dt.date
    check_in_time: datetime
    check_out_time: datetime | None = None
    break_start_time: datetime | None = None
    break_end_time: datetime | None = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    department: str | None = Field(default=None, max_length=255)
    supervisor_id: str | None = Field(default=None, max_length=64)
    remarks: str | None = None

    @model_validator(mode="after")
    def validate_time_order(self) -> "AttendanceManualRequest":
        check_in = normalize_ts(self.check_in_time)
        check_out = normalize_ts(self.check_out_time)
        break_start = normalize_ts(self.break_start_time)
        break_end = normalize_ts(self.break_end_time)
        if check_out is not None and check_out < check_in:
            raise ValueError("check_out_time must be after check_in_time")
        if break_end is not None and break_start is None:
            raise ValueError("break_end_time requires break_start_time")
        if break_start is not None and break_end is not None and break_end < break_start:
            raise ValueError("break_end_time must be after break_start_time")
        return self


class WeeklySummaryItem(BaseModel):
    employee_id: str
    employee_name: str
    department: str | None = None
    present_days: int
    absent_days: int
    half_days: int
    leave_days: int
    total_hours: float
    total_break_time: float
    overall_status: Literal["present", "absent", "mixed"]


class WeeklySummaryResponse(BaseModel):
    start_date: dt.date
    end_date: dt.date
    employees: list[WeeklySummaryItem]


# Manager attendance


class ManagerCheckinRequest(BaseModel):
    manager_id: str = Field(min_length=1, max_length=64)
    manager_name: str = Field(min_length=1, max_length=255)


class ManagerActionRequest(BaseModel):
    manager_id: str = Field(min_length=1, max_length=64)


class ManagerActivityCreate(BaseModel):
    manager_id: str = Field(min_length=1, max_length=64)
    manager_name: str | None = Field(default=None, max_length=255)
    type: str = Field(min_length=1, max_length=64)
    title: str = Field(min_length=1, max_length=255)
    details: str = ""


class ManagerActivityRead(BaseModel):
    id: int
    type: str
    title: str
    details: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class ManagerAttendanceRead(BaseModel):
    id: int
    manager_id: str
    manager_name: str
    date: dt.date
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    break_start_time: datetime | None = None
    break_end_time: datetime | None = None
    total_hours: float
    break_time: float
    is_checked_in: bool
    is_on_break: bool
    has_checked_out_today: bool
    activities: list[ManagerActivityRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ManagerHistoryStats(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    average_hours: float
    total_break_time: float
    attendance_rate: float


class ManagerHistoryResponse(BaseModel):
    items: list[ManagerAttendanceRead]
    total: int
    page: int
    limit: int
    pages: int
    stats: ManagerHistoryStats


class ManagerSummaryDay(BaseModel):
    date: dt.date
    day: str
    status: Literal["Present", "Late", "Half Day", "Checked In", "Absent"]
    check_in_time: datetime | None = None
    check_out_time: datetime | None = None
    total_hours: float = 0.0
    break_time: float = 0.0
    overtime_hours: float = 0.0
    is_on_break: bool = False


class ManagerSummaryStats(BaseModel):
    total_days: int
    present_days: int
    checked_in_days: int
    late_days: int
    half_days: int
    absent_days: int
    total_hours: float
    total_break_time: float
    overtime_hours: float
    average_hours: float
    attendance_rate: int


class ManagerMonthlySummary(BaseModel):
    manager_id: str
    month: int
    year: int
    days: list[ManagerSummaryDay]
    stats: ManagerSummaryStats
    current_status: ManagerAttendanceRead | None = None


class ManagerCleanupResponse(BaseModel):
    removed: int
    groups: int


class ServiceHealthResponse(BaseModel):
    status: Literal["ok"]
    database: Literal["connected"]
    checked_at_utc: datetime


# Roster


class RosterEntryBase(BaseModel):
    date: dt.date
    employee_id: str = Field(min_length=1, max_length=64)
    employee_name: str = Field(min_length=1, max_length=255)
    department: str = Field(min_length=1, max_length=255)
    designation: str = Field(min_length=1, max_length=255)
    shift: str = Field(min_length=1, max_length=100)
    shift_timing: str = Field(min_length=1, max_length=100)
    assigned_task: str = Field(min_length=1, max_length=500)
    hours: float = Field(ge=0, le=24)
    remark: str = ""
    type: RosterType
    site_client: str = Field(min_length=1, max_length=255)
    supervisor: str = Field(min_length=1, max_length=255)


class RosterEntryCreate(RosterEntryBase):
    pass


class RosterEntryUpdate(BaseModel):
    date: dt.date | None = None
    employee_id: str | None = Field(default=None, min_length=1, max_length=64)
    employee_name: str | None = Field(default=None, min_length=1, max_length=255)
    department: str | None = Field(default=None, min_length=1, max_length=255)
    designation: str | None = Field(default=None, min_length=1, max_length=255)
    shift: str | None = Field(default=None, min_length=1, max_length=100)
    shift_timing: str | None = Field(default=None, min_length=1, max_length=100)
    assigned_task: str | None = Field(default=None, min_length=1, max_length=500)
    hours: float | None = Field(default=None, ge=0, le=24)
    remark: str | None = None
    type: RosterType | None = None
    site_client: str | None = Field(default=None, min_length=1, max_length=255)
    supervisor: str | None = Field(default=None, min_length=1, max_length=255)


class RosterEntryRead(RosterEntryBase):
    id: int
    created_by: RosterCreator
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RosterPageStats(BaseModel):
    total_entries: int
    total_hours: float
    unique_employees: int


class RosterPage(BaseModel):
    items: list[RosterEntryRead]
    total: int
    page: int
    limit: int
    pages: int
    stats: RosterPageStats


class RosterStatsResponse(BaseModel):
    total_entries: int
    total_hours: float
    unique_employees: int
    by_type: dict[str, int]
    by_department: dict[str, int]
    by_creator: dict[str, int]


class RosterCalendarDay(BaseModel):
    date: dt.date
    total_hours: float
    entries: list[RosterEntryRead]


class RosterCalendarResponse(BaseModel):
    month: int
    year: int
    days: list[RosterCalendarDay]


class RosterCreatorSummary(BaseModel):
    created_by: RosterCreator
    total_entries: int
    total_hours: float
    unique_employees: int
    total_dates: int


class RosterSummaryResponse(BaseModel):
    summary: list[RosterCreatorSummary]
    total_entries: int
    total_hours: float


class RosterDuplicateRef(BaseModel):
    id: int
    employee_id: str
    employee_name: str
    date: dt.date
    shift: str
    created_by: RosterCreator

    model_config = ConfigDict(from_attributes=True)


class RosterDuplicateCheckResponse(BaseModel):
    is_duplicate: bool
    existing: RosterDuplicateRef | None = None


class RosterBulkCreateRequest(BaseModel):
    entries: list[RosterEntryCreate] = Field(min_length=1, max_length=500)


class RosterBulkDuplicate(BaseModel):
    index: int
    employee_id: str
    date: dt.date
    shift: str
    existing_id: int | None = None


class RosterBulkCreateResponse(BaseModel):
    created_count: int
    duplicate_count: int
    created: list[RosterEntryRead]
    duplicates: list[RosterBulkDuplicate]


# CRM


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default="Mumbai", max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=20)
    gst_number: str | None = Field(default=None, max_length=32)
    contact_person: str | None = Field(default=None, max_length=255)
    contact_person_phone: str | None = Field(default=None, max_length=50)
    value: str = Field(default="", max_length=100)
    industry: str = Field(default="IT Services", max_length=255)
    status: ClientStatus = ClientStatus.ACTIVE
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ClientUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    company: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=20)
    gst_number: str | None = Field(default=None, max_length=32)
    contact_person: str | None = Field(default=None, max_length=255)
    contact_person_phone: str | None = Field(default=None, max_length=50)
    value: str | None = Field(default=None, max_length=100)
    industry: str | None = Field(default=None, max_length=255)
    status: ClientStatus | None = None
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()


class ClientRead(BaseModel):
    id: int
    name: str
    company: str
    email: str
    phone: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    gst_number: str | None = None
    contact_person: str | None = None
    contact_person_phone: str | None = None
    value: str
    industry: str
    status: ClientStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClientStatsResponse(BaseModel):
    total: int
    active: int
    inactive: int


class LeadCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    source: LeadSource = LeadSource.WEBSITE
    status: LeadStatus = LeadStatus.NEW
    value: str = Field(default="", max_length=100)
    assigned_to: str = Field(default="Unassigned", min_length=1, max_length=255)
    follow_up_date: dt.date | None = None
    notes: str | None = None


class LeadUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    company: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    source: LeadSource | None = None
    status: LeadStatus | None = None
    value: str | None = Field(default=None, max_length=100)
    assigned_to: str | None = Field(default=None, min_length=1, max_length=255)
    follow_up_date: dt.date | None = None
    notes: str | None = None


class LeadStatusUpdate(BaseModel):
    status: LeadStatus


class LeadRead(BaseModel):
    id: int
    name: str
    company: str
    email: str
    phone: str
    source: LeadSource
    status: LeadStatus
    value: str
    assigned_to: str
    follow_up_date: dt.date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeadBulkImportResponse(BaseModel):
    imported_count: int
    skipped_count: int
    leads: list[LeadRead]


class CommunicationCreate(BaseModel):
    client_id: int = Field(ge=1)
    type: CommunicationType
    date: datetime | None = None
    notes: str = Field(min_length=1)
    follow_up_required: bool = False
    follow_up_date: dt.date | None = None


class CommunicationRead(BaseModel):
    id: int
    client_id: int
    client_name: str
    type: CommunicationType
    date: datetime
    notes: str
    follow_up_required: bool
    follow_up_date: dt.date | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Invoices


class InvoiceItem(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    hsn_code: str | None = Field(default=None, max_length=32)
    quantity: float = Field(gt=0)
    unit: str | None = Field(default=None, max_length=32)
    rate: float = Field(ge=0)
    amount: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def fill_amount(self) -> "InvoiceItem":
        if self.amount is None:
            self.amount = round(self.quantity * self.rate, 2)
        return self


class InvoiceCreate(BaseModel):
    invoice_id: str = Field(min_length=1, max_length=64)
    invoice_number: str | None = Field(default=None, max_length=64)
    voucher_no: str | None = Field(default=None, max_length=64)
    invoice_type: InvoiceType = InvoiceType.PERFORM
    status: InvoiceStatus = InvoiceStatus.PENDING
    date: dt.date
    due_date: dt.date | None = None
    is_visible_to_admin: bool = True
    client: str = Field(min_length=1, max_length=255)
    client_email: str | None = Field(default=None, max_length=255)
    client_address: str | None = Field(default=None, max_length=500)
    site: str | None = Field(default=None, max_length=255)
    service_type: str | None = Field(default=None, max_length=255)
    payment_terms: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    items: list[InvoiceItem] = Field(min_length=1)
    tax: float | None = Field(default=None, ge=0)
    discount: float = Field(default=0.0, ge=0)
    round_up: float = 0.0
    management_fees_percent: float | None = Field(default=None, ge=0, le=100)
    management_fees_amount: float | None = Field(default=None, ge=0)
    amount: float | None = Field(default=None, ge=0)


class InvoiceUpdate(BaseModel):
    invoice_number: str | None = Field(default=None, max_length=64)
    voucher_no: str | None = Field(default=None, max_length=64)
    invoice_type: InvoiceType | None = None
    status: InvoiceStatus | None = None
    date: dt.date | None = None
    due_date: dt.date | None = None
    is_visible_to_admin: bool | None = None
    client: str | None = Field(default=None, min_length=1, max_length=255)
    client_email: str | None = Field(default=None, max_length=255)
    client_address: str | None = Field(default=None, max_length=500)
    site: str | None = Field(default=None, max_length=255)
    service_type: str | None = Field(default=None, max_length=255)
    payment_terms: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    items: list[InvoiceItem] | None = Field(default=None, min_length=1)
    tax: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0)
    round_up: float | None = None
    management_fees_percent: float | None = Field(default=None, ge=0, le=100)
    management_fees_amount: float | None = Field(default=None, ge=0)
    amount: float | None = Field(default=None, ge=0)


class InvoiceRead(BaseModel):
    id: int
    invoice_id: str
    invoice_number: str
    voucher_no: str | None = None
    invoice_type: InvoiceType
    status: InvoiceStatus
    date: dt.date
    due_date: dt.date | None = None
    created_by: RosterCreator
    user_id: str | None = None
    shared_with: list[str]
    is_visible_to_admin: bool
    client: str
    client_email: str | None = None
    client_address: str | None = None
    site: str | None = None
    service_type: str | None = None
    payment_terms: str | None = None
    notes: str | None = None
    items: list[dict[str, Any]]
    subtotal: float
    tax: float
    discount: float
    round_up: float
    management_fees_percent: float | None = None
    management_fees_amount: float | None = None
    amount: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceShareRequest(BaseModel):
    user_ids: list[str] = Field(min_length=1)


class InvoiceStatsResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    total_amount: float
    amount_by_type: dict[str, float]
    recent: list[InvoiceRead]


# Expenses


class ExpenseCreate(BaseModel):
    category: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    base_amount: float = Field(ge=0)
    date: dt.date
    vendor: str = Field(min_length=1, max_length=255)
    payment_method: PaymentMethod
    site: str = Field(min_length=1, max_length=255)
    expense_type: ExpenseType
    receipt_url: str | None = Field(default=None, max_length=1024)
    notes: str | None = None
    created_by: str | None = Field(default=None, max_length=255)


class ExpenseUpdate(BaseModel):
    category: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    base_amount: float | None = Field(default=None, ge=0)
    date: dt.date | None = None
    vendor: str | None = Field(default=None, min_length=1, max_length=255)
    payment_method: PaymentMethod | None = None
    site: str | None = Field(default=None, min_length=1, max_length=255)
    expense_type: ExpenseType | None = None
    status: ExpenseStatus | None = None
    receipt_url: str | None = Field(default=None, max_length=1024)
    notes: str | None = None


class ExpenseStatusUpdate(BaseModel):
    status: ExpenseStatus


class ExpenseRead(BaseModel):
    id: int
    expense_id: str
    category: str
    description: str
    base_amount: float
    gst: float
    amount: float
    date: dt.date
    status: ExpenseStatus
    vendor: str
    payment_method: PaymentMethod
    site: str
    expense_type: ExpenseType
    receipt_url: str | None = None
    notes: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpensePage(BaseModel):
    items: list[ExpenseRead]
    total: int
    page: int
    limit: int
    pages: int


class ExpenseSiteBreakdown(BaseModel):
    site: str
    operational: float = 0.0
    office: float = 0.0
    other: float = 0.0
    total: float = 0.0


class ExpenseStatsResponse(BaseModel):
    period: Literal["monthly", "weekly"]
    start_date: dt.date
    end_date: dt.date
    by_site: list[ExpenseSiteBreakdown]
    by_type: dict[str, float]
    status_counts: dict[str, int]


class ExpenseSummaryResponse(BaseModel):
    month_total: float
    year_total: float
    pending_count: int
    recent: list[ExpenseRead]


# Leaves


class LeaveApplyRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)
    employee_name: str = Field(min_length=1, max_length=255)
    department: str = Field(min_length=1, max_length=255)
    contact_number: str = Field(min_length=1, max_length=50)
    leave_type: LeaveType
    from_date: dt.date
    to_date: dt.date
    reason: str = Field(min_length=1)
    applied_by: str | None = Field(default=None, max_length=255)
    applied_for: str | None = Field(default=None, max_length=255)


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus


class LeaveRead(BaseModel):
    id: int
    employee_id: str
    employee_name: str
    department: str
    contact_number: str
    leave_type: LeaveType
    from_date: dt.date
    to_date: dt.date
    total_days: int
    reason: str
    status: LeaveStatus
    applied_by: str
    applied_for: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeaveStatsResponse(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    by_type: dict[str, int]
