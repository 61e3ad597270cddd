from __future__ import annotations

import re
import unittest
from datetime import date
from unittest.mock import patch

from backoffice.services.expenses import _period_bounds, generate_expense_id
from tests.support import ApiTestCase

TODAY = date(2026, 6, 17)


def _expense(**overrides):  # type: ignore[no-untyped-def]
    payload = {
        "category": "Cleaning supplies",
        "description": "Floor cleaner and mops",
        "base_amount": 1000,
        "date": "2026-06-15",
        "vendor": "CleanCo",
        "payment_method": "UPI",
        "site": "Tower A",
        "expense_type": "operational",
    }
    payload.update(overrides)
    return payload


class ExpenseHelperTests(unittest.TestCase):
    def test_generated_id_format(self) -> None:
        self.assertRegex(generate_expense_id(), re.compile(r"^EXP-\d{3}-[0-9A-F]{6}$"))

    def test_period_bounds(self) -> None:
        self.assertEqual(_period_bounds("monthly", TODAY), (date(2026, 6, 1), date(2026, 6, 30)))
        self.assertEqual(_period_bounds("weekly", TODAY), (date(2026, 6, 15), date(2026, 6, 21)))
        self.assertEqual(_period_bounds("monthly", date(2026, 12, 31)), (date(2026, 12, 1), date(2026, 12, 31)))


class ExpenseEndpointTests(ApiTestCase, unittest.TestCase):
    def _create(self, **overrides):  # type: ignore[no-untyped-def]
        return self.client.post("/api/expenses", json=_expense(**overrides))

    def test_create_adds_gst_and_pending_status(self) -> None:
        response = self._create()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["gst"], 180)
        self.assertEqual(body["amount"], 1180)
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["created_by"], "system")
        self.assertTrue(body["expense_id"].startswith("EXP-"))

    def test_update_recomputes_gst_when_base_changes(self) -> None:
        created = self._create().json()
        response = self.client.put(f"/api/expenses/{created['id']}", json={"base_amount": 2000})
        self.assertEqual(response.json()["gst"], 360)
        self.assertEqual(response.json()["amount"], 2360)

        notes_only = self.client.put(f"/api/expenses/{created['id']}", json={"notes": "Reimbursed"})
        self.assertEqual(notes_only.json()["amount"], 2360)

    def test_unknown_payment_method_is_rejected(self) -> None:
        response = self._create(payment_method="Barter")
        self.assertEqual(response.status_code, 400)

    def test_status_patch_and_delete(self) -> None:
        created = self._create().json()
        approved = self.client.patch(f"/api/expenses/{created['id']}/status", json={"status": "approved"})
        self.assertEqual(approved.json()["status"], "approved")

        invalid = self.client.patch(f"/api/expenses/{created['id']}/status", json={"status": "archived"})
        self.assertEqual(invalid.status_code, 400)

        self.assertEqual(self.client.delete(f"/api/expenses/{created['id']}").status_code, 204)
        missing = self.client.get(f"/api/expenses/{created['id']}")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"]["code"], "EXPENSE_NOT_FOUND")

    def test_list_filters_and_search(self) -> None:
        self._create()
        self._create(vendor="PaperMart", expense_type="office", site="Head Office", category="Stationery")
        self._create(date="2026-05-01", vendor="OldVendor")

        by_type = self.client.get("/api/expenses", params={"expense_type": "office"}).json()
        self.assertEqual(by_type["total"], 1)

        by_range = self.client.get("/api/expenses", params={"start_date": "2026-06-01"}).json()
        self.assertEqual(by_range["total"], 2)

        by_search = self.client.get("/api/expenses", params={"search": "paper"}).json()
        self.assertEqual([item["vendor"] for item in by_search["items"]], ["PaperMart"])

        paged = self.client.get("/api/expenses", params={"limit": 2, "page": 2}).json()
        self.assertEqual(paged["pages"], 2)
        self.assertEqual(len(paged["items"]), 1)

    def test_stats_cover_approved_expenses_in_period(self) -> None:
        first = self._create().json()
        second = self._create(site="Head Office", expense_type="office", base_amount=500).json()
        self._create(site="Tower A", base_amount=9999)
        old = self._create(date="2026-04-10").json()
        for expense in (first, second, old):
            self.client.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"})

        with patch("backoffice.services.expenses.local_day", return_value=TODAY):
            response = self.client.get("/api/expenses/stats", params={"period": "monthly"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["start_date"], "2026-06-01")
        by_site = {row["site"]: row for row in body["by_site"]}
        self.assertEqual(by_site["Tower A"]["operational"], 1180)
        self.assertEqual(by_site["Head Office"]["office"], 590)
        self.assertEqual(by_site["Head Office"]["total"], 590)
        self.assertEqual(body["by_type"]["operational"], 1180)
        self.assertEqual(body["status_counts"], {"pending": 1, "approved": 3, "rejected": 0})

    def test_stats_reject_unknown_period(self) -> None:
        response = self.client.get("/api/expenses/stats", params={"period": "yearly"})
        self.assertEqual(response.status_code, 400)

    def test_summary_totals(self) -> None:
        june = self._create().json()
        january = self._create(date="2026-01-10", base_amount=100).json()
        self._create(base_amount=50)
        for expense in (june, january):
            self.client.patch(f"/api/expenses/{expense['id']}/status", json={"status": "approved"})

        with patch("backoffice.services.expenses.local_day", return_value=TODAY):
            body = self.client.get("/api/expenses/summary").json()

        self.assertEqual(body["month_total"], 1180)
        self.assertEqual(body["year_total"], 1298)
        self.assertEqual(body["pending_count"], 1)
        self.assertEqual(len(body["recent"]), 3)


if __name__ == "__main__":
    unittest.main()
