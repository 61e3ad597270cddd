from __future__ import annotations

import unittest

from backoffice.models import InvoiceType
from backoffice.schemas import InvoiceItem
from backoffice.services.invoices import compute_totals
from tests.support import ADMIN_HEADERS, EMPLOYEE_HEADERS, SUPERADMIN_HEADERS, ApiTestCase

OTHER_ADMIN_HEADERS = {"x-user-type": "admin", "x-user-id": "admin-2"}


def _invoice(invoice_id: str = "INV-001", **overrides):  # type: ignore[no-untyped-def]
    payload = {
        "invoice_id": invoice_id,
        "date": "2026-05-01",
        "client": "Acme Towers",
        "service_type": "Housekeeping",
        "items": [{"description": "Housekeeping staff", "quantity": 2, "rate": 500}],
    }
    payload.update(overrides)
    return payload


class ComputeTotalsTests(unittest.TestCase):
    def _items(self) -> list[InvoiceItem]:
        return [InvoiceItem(description="Guards", quantity=4, rate=250)]

    def test_item_amount_defaults_to_quantity_times_rate(self) -> None:
        item = InvoiceItem(description="Guards", quantity=3, rate=125.5)
        self.assertEqual(item.amount, 376.5)

    def test_perform_invoice_charges_gst_on_subtotal(self) -> None:
        totals = compute_totals(
            invoice_type=InvoiceType.PERFORM,
            items=self._items(),
            tax=None,
            discount=0.0,
            round_up=0.0,
            management_fees_percent=10,
            management_fees_amount=None,
            amount=None,
        )
        self.assertEqual(totals["subtotal"], 1000.0)
        self.assertEqual(totals["tax"], 180.0)
        self.assertEqual(totals["amount"], 1180.0)

    def test_tax_invoice_adds_management_fees_before_gst(self) -> None:
        totals = compute_totals(
            invoice_type=InvoiceType.TAX,
            items=self._items(),
            tax=None,
            discount=20.0,
            round_up=0.5,
            management_fees_percent=10,
            management_fees_amount=None,
            amount=None,
        )
        self.assertEqual(totals["management_fees_amount"], 100.0)
        self.assertEqual(totals["tax"], 198.0)
        self.assertEqual(totals["amount"], 1278.5)

    def test_explicit_tax_and_amount_win(self) -> None:
        totals = compute_totals(
            invoice_type=InvoiceType.TAX,
            items=self._items(),
            tax=50.0,
            discount=0.0,
            round_up=0.0,
            management_fees_percent=None,
            management_fees_amount=None,
            amount=999.0,
        )
        self.assertEqual(totals["tax"], 50.0)
        self.assertEqual(totals["amount"], 999.0)


class InvoiceEndpointTests(ApiTestCase, unittest.TestCase):
    def _create(self, headers, invoice_id: str = "INV-001", **overrides):  # type: ignore[no-untyped-def]
        return self.client.post("/api/invoices", json=_invoice(invoice_id, **overrides), headers=headers)

    def test_create_fills_defaults_from_caller(self) -> None:
        response = self._create(ADMIN_HEADERS)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["created_by"], "admin")
        self.assertEqual(body["user_id"], "admin-1")
        self.assertEqual(body["invoice_number"], "INV-001")
        self.assertEqual(body["due_date"], "2026-05-31")
        self.assertEqual(body["subtotal"], 1000)
        self.assertEqual(body["tax"], 180)
        self.assertEqual(body["amount"], 1180)
        self.assertEqual(body["items"][0]["amount"], 1000)

    def test_duplicate_invoice_id_is_rejected(self) -> None:
        self._create(SUPERADMIN_HEADERS)
        response = self._create(SUPERADMIN_HEADERS)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "INVOICE_EXISTS")

    def test_invoice_requires_an_item(self) -> None:
        response = self._create(SUPERADMIN_HEADERS, items=[])
        self.assertEqual(response.status_code, 400)

    def test_only_admin_roles_can_create(self) -> None:
        response = self._create(EMPLOYEE_HEADERS)
        self.assertEqual(response.status_code, 403)

    def test_admin_visibility_rules(self) -> None:
        self._create(SUPERADMIN_HEADERS, "INV-PUBLIC")
        self._create(SUPERADMIN_HEADERS, "INV-PRIVATE", is_visible_to_admin=False)
        self._create(ADMIN_HEADERS, "INV-ADMIN1")

        visible_to_admin2 = {
            item["invoice_id"] for item in self.client.get("/api/invoices", headers=OTHER_ADMIN_HEADERS).json()
        }
        self.assertEqual(visible_to_admin2, {"INV-PUBLIC"})

        visible_to_superadmin = self.client.get("/api/invoices", headers=SUPERADMIN_HEADERS).json()
        self.assertEqual(len(visible_to_superadmin), 3)

        hidden = self.client.get("/api/invoices/INV-PRIVATE", headers=OTHER_ADMIN_HEADERS)
        self.assertEqual(hidden.status_code, 403)

    def test_share_makes_invoice_visible(self) -> None:
        self._create(SUPERADMIN_HEADERS, "INV-PRIVATE", is_visible_to_admin=False)

        shared = self.client.post(
            "/api/invoices/INV-PRIVATE/share",
            json={"user_ids": ["admin-2", "admin-2"]},
            headers=SUPERADMIN_HEADERS,
        )
        self.assertEqual(shared.status_code, 200)
        self.assertEqual(shared.json()["shared_with"], ["admin-2"])

        again = self.client.post(
            "/api/invoices/INV-PRIVATE/share",
            json={"user_ids": ["admin-2", "admin-3"]},
            headers=SUPERADMIN_HEADERS,
        )
        self.assertEqual(again.json()["shared_with"], ["admin-2", "admin-3"])

        response = self.client.get("/api/invoices/INV-PRIVATE", headers=OTHER_ADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)

    def test_only_superadmin_can_share(self) -> None:
        self._create(ADMIN_HEADERS)
        response = self.client.post(
            "/api/invoices/INV-001/share",
            json={"user_ids": ["admin-2"]},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 403)

    def test_only_creator_or_superadmin_can_modify(self) -> None:
        self._create(ADMIN_HEADERS)

        other = self.client.put("/api/invoices/INV-001", json={"notes": "x"}, headers=OTHER_ADMIN_HEADERS)
        self.assertEqual(other.status_code, 403)
        other_delete = self.client.delete("/api/invoices/INV-001", headers=OTHER_ADMIN_HEADERS)
        self.assertEqual(other_delete.status_code, 403)

        owner = self.client.put(
            "/api/invoices/INV-001",
            json={"items": [{"description": "Guards", "quantity": 1, "rate": 2000}], "discount": 60},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(owner.status_code, 200)
        self.assertEqual(owner.json()["subtotal"], 2000)
        self.assertEqual(owner.json()["tax"], 360)
        self.assertEqual(owner.json()["amount"], 2300)

        deleted = self.client.delete("/api/invoices/INV-001", headers=SUPERADMIN_HEADERS)
        self.assertEqual(deleted.status_code, 204)
        missing = self.client.get("/api/invoices/INV-001", headers=SUPERADMIN_HEADERS)
        self.assertEqual(missing.status_code, 404)

    def test_mark_paid_and_stats(self) -> None:
        self._create(SUPERADMIN_HEADERS, "INV-1")
        self._create(SUPERADMIN_HEADERS, "INV-2", invoice_type="tax", management_fees_amount=100)

        paid = self.client.patch("/api/invoices/INV-1/mark-paid", headers=SUPERADMIN_HEADERS)
        self.assertEqual(paid.json()["status"], "paid")

        stats = self.client.get("/api/invoices/stats/summary", headers=SUPERADMIN_HEADERS).json()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["by_status"]["paid"], 1)
        self.assertEqual(stats["by_status"]["pending"], 1)
        self.assertEqual(stats["amount_by_type"]["perform"], 1180)
        self.assertEqual(stats["amount_by_type"]["tax"], 1298)
        self.assertEqual(stats["total_amount"], 2478)
        self.assertEqual(len(stats["recent"]), 2)

    def test_discount_edit_keeps_flat_management_fee(self) -> None:
        created = self._create(SUPERADMIN_HEADERS, "INV-TAX", invoice_type="tax", management_fees_amount=100)
        self.assertEqual(created.json()["amount"], 1298)

        response = self.client.put("/api/invoices/INV-TAX", json={"discount": 10}, headers=SUPERADMIN_HEADERS)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["management_fees_amount"], 100)
        self.assertEqual(body["tax"], 198)
        self.assertEqual(body["amount"], 1288)

    def test_percent_fee_is_recomputed_when_items_change(self) -> None:
        self._create(SUPERADMIN_HEADERS, "INV-PCT", invoice_type="tax", management_fees_percent=10)

        response = self.client.put(
            "/api/invoices/INV-PCT",
            json={"items": [{"description": "Guards", "quantity": 1, "rate": 2000}]},
            headers=SUPERADMIN_HEADERS,
        )
        body = response.json()
        self.assertEqual(body["management_fees_amount"], 200)
        self.assertEqual(body["tax"], 396)
        self.assertEqual(body["amount"], 2596)

    def test_type_filter_and_search(self) -> None:
        self._create(SUPERADMIN_HEADERS, "INV-1")
        self._create(SUPERADMIN_HEADERS, "INV-2", invoice_type="tax", client="Globex Park")

        by_type = self.client.get("/api/invoices/type/tax", headers=SUPERADMIN_HEADERS).json()
        self.assertEqual([item["invoice_id"] for item in by_type], ["INV-2"])

        found = self.client.get("/api/invoices/search/globex", headers=SUPERADMIN_HEADERS).json()
        self.assertEqual([item["invoice_id"] for item in found], ["INV-2"])


if __name__ == "__main__":
    unittest.main()
