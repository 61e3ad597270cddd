from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine, Inspector
from sqlalchemy.exc import SQLAlchemyError

REQUIRED_TABLE_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "username", "password_hash", "role"},
    "alerts": {"id", "severity", "status", "photos"},
    "attendance_records": {"id", "employee_id", "date", "is_checked_in", "is_on_break", "break_time"},
    "manager_attendance": {"id", "manager_id", "date", "has_checked_out_today"},
    "manager_activities": {"id", "manager_attendance_id", "type"},
    "roster_entries": {"id", "employee_id", "date", "shift", "created_by"},
    "clients": {"id", "email", "status"},
    "leads": {"id", "source", "status"},
    "communications": {"id", "client_id", "type"},
    "invoices": {"id", "invoice_id", "created_by", "user_id", "shared_with", "is_visible_to_admin"},
    "expenses": {"id", "expense_id", "base_amount", "gst", "expense_type"},
    "leaves": {"id", "employee_id", "from_date", "to_date", "total_days"},
    "audit_logs": {"id", "action", "details"},
    "alembic_version": {"version_num"},
}

# Role-scoped logic depends on these labels; other enums are only checked by migrations.
REQUIRED_ENUM_VALUES: dict[str, set[str]] = {
    "attendance_status": {"present", "absent", "half-day", "leave"},
    "roster_creator": {"superadmin", "admin"},
}


@dataclass(frozen=True, slots=True)
class SchemaGuardResult:
    ok: bool
    checked_at_utc: datetime
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "checked_at_utc": self.checked_at_utc.isoformat(),
            "issues": list(self.issues),
            "warnings": list(self.warnings),
            "issue_count": len(self.issues),
            "warning_count": len(self.warnings),
        }


def _check_columns(inspector: Inspector) -> list[str]:
    issues: list[str] = []
    for table_name, required_columns in REQUIRED_TABLE_COLUMNS.items():
        try:
            present = {str(column.get("name")) for column in inspector.get_columns(table_name)}
        except SQLAlchemyError as exc:
            issues.append(f"TABLE_UNREADABLE:{table_name}:{exc.__class__.__name__}")
            continue
        missing = sorted(required_columns - present)
        if missing:
            issues.append(f"MISSING_COLUMNS:{table_name}:{','.join(missing)}")
    return issues


def _enum_labels(inspector: Inspector) -> dict[str, set[str]] | None:
    try:
        enums = inspector.get_enums() or []
    except (AttributeError, NotImplementedError, SQLAlchemyError):
        # Only the PostgreSQL inspector exposes named enum types.
        return None

    labels_by_name: dict[str, set[str]] = {}
    for item in enums:
        name = str(item.get("name") or "").strip()
        labels = item.get("labels")
        if name and isinstance(labels, list):
            labels_by_name[name] = {str(label) for label in labels}
    return labels_by_name


def _check_enums(inspector: Inspector) -> tuple[list[str], list[str]]:
    labels_by_name = _enum_labels(inspector)
    if labels_by_name is None:
        return [], ["ENUM_INSPECTION_UNSUPPORTED"]

    issues: list[str] = []
    warnings: list[str] = []
    for enum_name, required_values in REQUIRED_ENUM_VALUES.items():
        if enum_name not in labels_by_name:
            warnings.append(f"ENUM_NOT_FOUND:{enum_name}")
            continue
        missing = sorted(required_values - labels_by_name[enum_name])
        if missing:
            issues.append(f"MISSING_ENUM_VALUES:{enum_name}:{','.join(missing)}")
    return issues, warnings


def _check_alembic_version(engine: Engine) -> list[str]:
    try:
        with engine.connect() as connection:
            version = connection.execute(text("SELECT version_num FROM alembic_version LIMIT 1")).scalar()
    except SQLAlchemyError as exc:
        return [f"ALEMBIC_VERSION_CHECK_FAILED:{exc.__class__.__name__}"]
    if version is None or not str(version).strip():
        return ["ALEMBIC_VERSION_EMPTY"]
    return []


def verify_runtime_schema(engine: Engine) -> SchemaGuardResult:
    """Compare the live database with what the models need before serving traffic."""
    checked_at_utc = datetime.now(timezone.utc)
    inspector = inspect(engine)

    enum_issues, warnings = _check_enums(inspector)
    issues = _check_columns(inspector) + enum_issues + _check_alembic_version(engine)
    return SchemaGuardResult(ok=not issues, checked_at_utc=checked_at_utc, issues=issues, warnings=warnings)
