from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from backoffice import main
from backoffice.services.schema_guard import REQUIRED_TABLE_COLUMNS, SchemaGuardResult, verify_runtime_schema


class _FakeResult:
    def __init__(self, value):
        self._value = value

    def scalar(self):  # type: ignore[no-untyped-def]
        return self._value


class _FakeConnection:
    def __init__(self, version_value):
        self._version_value = version_value

    def __enter__(self):  # type: ignore[no-untyped-def]
        return self

    def __exit__(self, exc_type, exc, tb):  # type: ignore[no-untyped-def]
        return False

    def execute(self, _statement):  # type: ignore[no-untyped-def]
        return _FakeResult(self._version_value)


class _FakeEngine:
    def __init__(self, version_value):
        self._version_value = version_value

    def connect(self):  # type: ignore[no-untyped-def]
        return _FakeConnection(self._version_value)


class _FakeInspector:
    def __init__(self, *, columns_by_table: dict[str, set[str]], enums: list[dict[str, object]]):
        self._columns_by_table = columns_by_table
        self._enums = enums

    def get_columns(self, table_name: str):  # type: ignore[no-untyped-def]
        columns = self._columns_by_table[table_name]
        return [{"name": item} for item in columns]

    def get_enums(self):  # type: ignore[no-untyped-def]
        return self._enums


def _complete_columns() -> dict[str, set[str]]:
    return {table: set(columns) | {"created_at"} for table, columns in REQUIRED_TABLE_COLUMNS.items()}


COMPLETE_ENUMS = [
    {"name": "attendance_status", "labels": ["present", "absent", "half-day", "leave"]},
    {"name": "roster_creator", "labels": ["superadmin", "admin"]},
]


class SchemaGuardTests(unittest.TestCase):
    def test_verify_runtime_schema_ok_when_required_columns_exist(self) -> None:
        fake_inspector = _FakeInspector(columns_by_table=_complete_columns(), enums=COMPLETE_ENUMS)
        fake_engine = _FakeEngine("0001_initial")

        with patch("backoffice.services.schema_guard.inspect", return_value=fake_inspector):
            result = verify_runtime_schema(fake_engine)  # type: ignore[arg-type]

        self.assertTrue(result.ok)
        self.assertEqual(result.issues, [])
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.to_dict()["issue_count"], 0)

    def test_verify_runtime_schema_reports_missing_columns(self) -> None:
        columns = _complete_columns()
        columns["roster_entries"].discard("created_by")
        columns["invoices"] -= {"shared_with", "user_id"}
        fake_inspector = _FakeInspector(
            columns_by_table=columns,
            enums=[
                {"name": "attendance_status", "labels": ["present", "absent"]},
                {"name": "roster_creator", "labels": ["superadmin", "admin"]},
            ],
        )
        fake_engine = _FakeEngine("")

        with patch("backoffice.services.schema_guard.inspect", return_value=fake_inspector):
            result = verify_runtime_schema(fake_engine)  # type: ignore[arg-type]

        self.assertFalse(result.ok)
        self.assertIn("MISSING_COLUMNS:roster_entries:created_by", result.issues)
        self.assertIn("MISSING_COLUMNS:invoices:shared_with,user_id", result.issues)
        self.assertIn("MISSING_ENUM_VALUES:attendance_status:half-day,leave", result.issues)
        self.assertIn("ALEMBIC_VERSION_EMPTY", result.issues)

    def test_missing_enum_type_is_only_a_warning(self) -> None:
        fake_inspector = _FakeInspector(columns_by_table=_complete_columns(), enums=COMPLETE_ENUMS[:1])
        fake_engine = _FakeEngine("0001_initial")

        with patch("backoffice.services.schema_guard.inspect", return_value=fake_inspector):
            result = verify_runtime_schema(fake_engine)  # type: ignore[arg-type]

        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, ["ENUM_NOT_FOUND:roster_creator"])


class StartupSchemaGuardTests(unittest.TestCase):
    def tearDown(self) -> None:
        if hasattr(main.app.state, "schema_guard_result"):
            del main.app.state.schema_guard_result

    def _failed_result(self) -> SchemaGuardResult:
        return SchemaGuardResult(
            ok=False,
            checked_at_utc=datetime(2026, 3, 2, tzinfo=timezone.utc),
            issues=["ALEMBIC_VERSION_EMPTY"],
        )

    def test_failed_guard_is_reported_on_health(self) -> None:
        with patch("backoffice.main.verify_runtime_schema", return_value=self._failed_result()):
            with TestClient(main.app) as client:
                body = client.get("/health").json()
        self.assertFalse(body["schema_guard"]["ok"])
        self.assertEqual(body["schema_guard"]["issues"], ["ALEMBIC_VERSION_EMPTY"])

    def test_strict_mode_refuses_to_start(self) -> None:
        with patch("backoffice.main.verify_runtime_schema", return_value=self._failed_result()):
            with patch.object(main.settings, "schema_guard_strict", True):
                with self.assertRaisesRegex(RuntimeError, "ALEMBIC_VERSION_EMPTY"):
                    with TestClient(main.app):
                        pass


if __name__ == "__main__":
    unittest.main()
