from __future__ import annotations

import unittest

from tests.support import ADMIN_HEADERS, EMPLOYEE_HEADERS, SUPERADMIN_HEADERS, ApiTestCase


def _entry(**overrides):  # type: ignore[no-untyped-def]
    payload = {
        "date": "2026-04-06",
        "employee_id": "E-100",
        "employee_name": "Kiran",
        "department": "Housekeeping",
        "designation": "Supervisor",
        "shift": "Morning",
        "shift_timing": "07:00-15:00",
        "assigned_task": "Lobby cleaning",
        "hours": 8,
        "type": "daily",
        "site_client": "Tower A",
        "supervisor": "Ramesh",
    }
    payload.update(overrides)
    return payload


class RosterRoleTests(ApiTestCase, unittest.TestCase):
    def _create(self, headers, **overrides):  # type: ignore[no-untyped-def]
        return self.client.post("/api/roster", json=_entry(**overrides), headers=headers)

    def test_created_by_follows_caller_role(self) -> None:
        superadmin = self._create(SUPERADMIN_HEADERS)
        admin = self._create(ADMIN_HEADERS)

        self.assertEqual(superadmin.status_code, 201)
        self.assertEqual(superadmin.json()["created_by"], "superadmin")
        self.assertEqual(admin.status_code, 201)
        self.assertEqual(admin.json()["created_by"], "admin")

    def test_superadmin_collides_with_any_creator(self) -> None:
        self._create(ADMIN_HEADERS)
        response = self._create(SUPERADMIN_HEADERS)

        self.assertEqual(response.status_code, 409)
        error = response.json()["error"]
        self.assertEqual(error["code"], "DUPLICATE_ROSTER_ENTRY")
        self.assertEqual(error["details"]["existing"]["created_by"], "admin")

    def test_admin_only_collides_with_admin_entries(self) -> None:
        self._create(SUPERADMIN_HEADERS)
        first_admin = self._create(ADMIN_HEADERS)
        second_admin = self._create(ADMIN_HEADERS)

        self.assertEqual(first_admin.status_code, 201)
        self.assertEqual(second_admin.status_code, 409)

    def test_different_shift_is_not_a_duplicate(self) -> None:
        self._create(SUPERADMIN_HEADERS)
        response = self._create(SUPERADMIN_HEADERS, shift="Night", shift_timing="22:00-06:00")
        self.assertEqual(response.status_code, 201)

    def test_other_roles_cannot_create(self) -> None:
        response = self._create(EMPLOYEE_HEADERS)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "FORBIDDEN")

    def test_unknown_user_type_is_rejected(self) -> None:
        response = self._create({"x-user-type": "janitor"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_USER_TYPE")

    def test_hours_outside_day_are_rejected(self) -> None:
        response = self._create(SUPERADMIN_HEADERS, hours=25)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_check_duplicate_uses_caller_role(self) -> None:
        self._create(SUPERADMIN_HEADERS)
        params = {"employee_id": "E-100", "date": "2026-04-06", "shift": "Morning"}

        as_superadmin = self.client.get("/api/roster/check-duplicate", params=params, headers=SUPERADMIN_HEADERS)
        as_admin = self.client.get("/api/roster/check-duplicate", params=params, headers=ADMIN_HEADERS)

        self.assertTrue(as_superadmin.json()["is_duplicate"])
        self.assertEqual(as_superadmin.json()["existing"]["employee_id"], "E-100")
        self.assertFalse(as_admin.json()["is_duplicate"])
        self.assertIsNone(as_admin.json()["existing"])

    def test_admin_cannot_modify_superadmin_entries(self) -> None:
        entry_id = self._create(SUPERADMIN_HEADERS).json()["id"]

        update = self.client.put(f"/api/roster/{entry_id}", json={"hours": 6}, headers=ADMIN_HEADERS)
        delete = self.client.delete(f"/api/roster/{entry_id}", headers=ADMIN_HEADERS)

        self.assertEqual(update.status_code, 403)
        self.assertEqual(delete.status_code, 403)

    def test_superadmin_can_modify_admin_entries(self) -> None:
        entry_id = self._create(ADMIN_HEADERS).json()["id"]

        update = self.client.put(f"/api/roster/{entry_id}", json={"hours": 6}, headers=SUPERADMIN_HEADERS)
        self.assertEqual(update.status_code, 200)
        self.assertEqual(update.json()["hours"], 6)

        delete = self.client.delete(f"/api/roster/{entry_id}", headers=SUPERADMIN_HEADERS)
        self.assertEqual(delete.status_code, 204)
        self.assertEqual(self.client.get(f"/api/roster/{entry_id}").status_code, 404)

    def test_update_missing_entry_returns_404(self) -> None:
        response = self.client.put("/api/roster/404", json={"hours": 6}, headers=SUPERADMIN_HEADERS)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "ROSTER_ENTRY_NOT_FOUND")


class RosterBulkTests(ApiTestCase, unittest.TestCase):
    def test_bulk_skips_existing_and_in_batch_duplicates(self) -> None:
        self.client.post("/api/roster", json=_entry(), headers=SUPERADMIN_HEADERS)
        entries = [
            _entry(),
            _entry(employee_id="E-101"),
            _entry(employee_id="E-101"),
            _entry(employee_id="E-102", shift="Night"),
        ]

        response = self.client.post("/api/roster/bulk", json={"entries": entries}, headers=SUPERADMIN_HEADERS)

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["created_count"], 2)
        self.assertEqual(body["duplicate_count"], 2)
        self.assertEqual([item["index"] for item in body["duplicates"]], [0, 2])
        self.assertIsNotNone(body["duplicates"][0]["existing_id"])
        self.assertIsNone(body["duplicates"][1]["existing_id"])

    def test_bulk_of_only_duplicates_is_a_conflict(self) -> None:
        self.client.post("/api/roster", json=_entry(), headers=SUPERADMIN_HEADERS)
        response = self.client.post("/api/roster/bulk", json={"entries": [_entry()]}, headers=SUPERADMIN_HEADERS)
        self.assertEqual(response.status_code, 409)

    def test_empty_bulk_is_rejected(self) -> None:
        response = self.client.post("/api/roster/bulk", json={"entries": []}, headers=SUPERADMIN_HEADERS)
        self.assertEqual(response.status_code, 400)


class RosterReportingTests(ApiTestCase, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.post("/api/roster", json=_entry(), headers=SUPERADMIN_HEADERS)
        self.client.post(
            "/api/roster",
            json=_entry(employee_id="E-200", department="Security", type="weekly", hours=12),
            headers=SUPERADMIN_HEADERS,
        )
        self.client.post("/api/roster", json=_entry(date="2026-04-07", hours=6), headers=ADMIN_HEADERS)

    def test_list_reports_page_stats(self) -> None:
        response = self.client.get("/api/roster", params={"start_date": "2026-04-06", "end_date": "2026-04-06"})
        body = response.json()
        self.assertEqual(body["total"], 2)
        self.assertEqual(body["stats"]["total_hours"], 20)
        self.assertEqual(body["stats"]["unique_employees"], 2)

    def test_stats_breakdowns(self) -> None:
        body = self.client.get("/api/roster/stats").json()
        self.assertEqual(body["total_entries"], 3)
        self.assertEqual(body["total_hours"], 26)
        self.assertEqual(body["by_type"], {"daily": 2, "weekly": 1})
        self.assertEqual(body["by_department"], {"Housekeeping": 2, "Security": 1})
        self.assertEqual(body["by_creator"], {"superadmin": 2, "admin": 1})

    def test_calendar_groups_entries_by_date(self) -> None:
        body = self.client.get("/api/roster/calendar", params={"month": 4, "year": 2026}).json()
        self.assertEqual([day["date"] for day in body["days"]], ["2026-04-06", "2026-04-07"])
        self.assertEqual(body["days"][0]["total_hours"], 20)
        self.assertEqual(len(body["days"][1]["entries"]), 1)

    def test_summary_per_creator(self) -> None:
        body = self.client.get("/api/roster/summary").json()
        by_creator = {item["created_by"]: item for item in body["summary"]}
        self.assertEqual(by_creator["superadmin"]["total_entries"], 2)
        self.assertEqual(by_creator["superadmin"]["unique_employees"], 2)
        self.assertEqual(by_creator["admin"]["total_dates"], 1)
        self.assertEqual(body["total_entries"], 3)
        self.assertEqual(body["total_hours"], 26)


if __name__ == "__main__":
    unittest.main()
