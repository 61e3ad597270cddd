from __future__ import annotations

import unittest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from backoffice.models import ManagerAttendance
from backoffice.services import manager_attendance as manager_service
from tests.support import ApiTestCase, SqliteDatabase

# 09:00 local time in Asia/Kolkata.
DAY_START = datetime(2026, 3, 10, 3, 30, tzinfo=timezone.utc)


def _at(hours: float):  # type: ignore[no-untyped-def]
    return patch(
        "backoffice.services.manager_attendance.utcnow",
        return_value=DAY_START + timedelta(hours=hours),
    )


class ManagerAttendanceEndpointTests(ApiTestCase, unittest.TestCase):
    def test_day_cycle_records_activities(self) -> None:
        with _at(0):
            response = self.client.post(
                "/api/manager-attendance/checkin",
                json={"manager_id": "M-1", "manager_name": "Meera"},
            )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_checked_in"])
        self.assertEqual(response.json()["activities"][0]["type"], "checkin")

        with _at(2):
            self.client.post("/api/manager-attendance/breakin", json={"manager_id": "M-1"})
        with _at(2.5):
            self.client.post("/api/manager-attendance/breakout", json={"manager_id": "M-1"})
        with _at(9):
            response = self.client.post("/api/manager-attendance/checkout", json={"manager_id": "M-1"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertAlmostEqual(body["total_hours"], 8.5)
        self.assertAlmostEqual(body["break_time"], 0.5)
        self.assertTrue(body["has_checked_out_today"])
        self.assertEqual(
            [item["title"] for item in body["activities"]],
            ["Checked in", "Break started", "Break ended", "Checked out"],
        )

    def test_checkin_after_checkout_is_rejected(self) -> None:
        with _at(0):
            self.client.post("/api/manager-attendance/checkin", json={"manager_id": "M-1", "manager_name": "Meera"})
        with _at(8):
            self.client.post("/api/manager-attendance/checkout", json={"manager_id": "M-1"})
        with _at(9):
            response = self.client.post(
                "/api/manager-attendance/checkin",
                json={"manager_id": "M-1", "manager_name": "Meera"},
            )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "ALREADY_CHECKED_OUT")

    def test_checkout_requires_checkin_and_no_open_break(self) -> None:
        with _at(0):
            missing = self.client.post("/api/manager-attendance/checkout", json={"manager_id": "M-2"})
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"]["code"], "NO_CHECKIN_TODAY")

        with _at(0):
            self.client.post("/api/manager-attendance/checkin", json={"manager_id": "M-2", "manager_name": "Dev"})
        with _at(1):
            self.client.post("/api/manager-attendance/breakin", json={"manager_id": "M-2"})
            again = self.client.post("/api/manager-attendance/breakin", json={"manager_id": "M-2"})
        with _at(2):
            on_break = self.client.post("/api/manager-attendance/checkout", json={"manager_id": "M-2"})

        self.assertEqual(again.json()["error"]["code"], "ALREADY_ON_BREAK")
        self.assertEqual(on_break.status_code, 400)
        self.assertEqual(on_break.json()["error"]["code"], "ON_BREAK")

    def test_breakout_without_break_is_rejected(self) -> None:
        with _at(0):
            self.client.post("/api/manager-attendance/checkin", json={"manager_id": "M-3", "manager_name": "Ila"})
            response = self.client.post("/api/manager-attendance/breakout", json={"manager_id": "M-3"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "NOT_ON_BREAK")

    def test_activity_creates_the_day_record(self) -> None:
        with _at(1):
            response = self.client.post(
                "/api/manager-attendance/activity",
                json={"manager_id": "M-4", "type": "site-visit", "title": "Visited Andheri site"},
            )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["is_checked_in"])
        self.assertEqual(body["manager_name"], "M-4")
        self.assertEqual(body["activities"][0]["title"], "Visited Andheri site")

    def test_today_returns_null_without_record(self) -> None:
        response = self.client.get("/api/manager-attendance/today/NOBODY")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

    def test_health_reports_connected_database(self) -> None:
        response = self.client.get("/api/manager-attendance/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")

    def test_health_returns_503_when_database_is_down(self) -> None:
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
        with patch("sqlalchemy.orm.Session.execute", side_effect=failure):
            response = self.client.get("/api/manager-attendance/health")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"]["code"], "DATABASE_UNAVAILABLE")

    def test_cleanup_requires_admin_role(self) -> None:
        response = self.client.post("/api/manager-attendance/cleanup", headers={"x-user-type": "manager"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "FORBIDDEN")

        response = self.client.post("/api/manager-attendance/cleanup", headers={"x-user-type": "superadmin"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"removed": 0, "groups": 0})


class ManagerSummaryServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.database = SqliteDatabase()
        self.db = self.database.session()

    def tearDown(self) -> None:
        self.db.close()
        self.database.dispose()

    def _record(self, day: date, check_in_utc: str, hours: float, *, checked_out: bool = True) -> None:
        check_in = datetime.fromisoformat(check_in_utc).replace(tzinfo=timezone.utc)
        self.db.add(
            ManagerAttendance(
                manager_id="M-1",
                manager_name="Meera",
                date=day,
                check_in_time=check_in,
                check_out_time=check_in + timedelta(hours=hours) if checked_out else None,
                total_hours=hours if checked_out else 0.0,
                break_time=0.0,
                is_checked_in=not checked_out,
                is_on_break=False,
                has_checked_out_today=checked_out,
            )
        )
        self.db.commit()

    def test_monthly_summary_classifies_days(self) -> None:
        self._record(date(2026, 2, 2), "2026-02-02T03:30:00", 9.0)
        self._record(date(2026, 2, 3), "2026-02-03T05:00:00", 8.0)
        self._record(date(2026, 2, 4), "2026-02-04T05:00:00", 3.0)
        self._record(date(2026, 2, 5), "2026-02-05T03:30:00", 0.0, checked_out=False)

        summary = manager_service.monthly_summary(self.db, "M-1", month=2, year=2026)

        statuses = {item["date"]: item["status"] for item in summary["days"]}
        self.assertEqual(statuses[date(2026, 2, 2)], "Present")
        self.assertEqual(statuses[date(2026, 2, 3)], "Late")
        self.assertEqual(statuses[date(2026, 2, 4)], "Half Day")
        self.assertEqual(statuses[date(2026, 2, 5)], "Checked In")
        self.assertEqual(statuses[date(2026, 2, 6)], "Absent")

        stats = summary["stats"]
        self.assertEqual(stats["total_days"], 28)
        self.assertEqual(stats["present_days"], 3)
        self.assertEqual(stats["late_days"], 1)
        self.assertEqual(stats["half_days"], 1)
        self.assertEqual(stats["checked_in_days"], 1)
        self.assertEqual(stats["absent_days"], 24)
        self.assertAlmostEqual(stats["total_hours"], 20.0)
        self.assertAlmostEqual(stats["overtime_hours"], 1.0)

    def test_history_stats_count_completed_days(self) -> None:
        self._record(date(2026, 2, 2), "2026-02-02T03:30:00", 8.0)
        self._record(date(2026, 2, 3), "2026-02-03T03:30:00", 6.0)
        self._record(date(2026, 2, 4), "2026-02-04T03:30:00", 0.0, checked_out=False)

        history = manager_service.attendance_history(
            self.db,
            "M-1",
            start_date=None,
            end_date=None,
            page=1,
            limit=30,
        )

        self.assertEqual(history["total"], 3)
        self.assertEqual(history["items"][0].date, date(2026, 2, 4))
        self.assertEqual(history["stats"]["present_days"], 2)
        self.assertEqual(history["stats"]["absent_days"], 1)
        self.assertAlmostEqual(history["stats"]["average_hours"], 7.0)
        self.assertEqual(history["stats"]["attendance_rate"], 67)


if __name__ == "__main__":
    unittest.main()
