from __future__ import annotations

import unittest
from datetime import date
from unittest.mock import patch

from tests.support import ApiTestCase


def _alert(**overrides):  # type: ignore[no-untyped-def]
    payload = {
        "title": "Water leak",
        "description": "Leak near the basement parking ramp",
        "severity": "high",
        "reported_by": "Guard Suresh",
        "site": "Tower A",
    }
    payload.update(overrides)
    return payload


class AlertEndpointTests(ApiTestCase, unittest.TestCase):
    def test_create_defaults_to_open_and_today(self) -> None:
        with patch("backoffice.services.alerts.local_day", return_value=date(2026, 3, 2)):
            response = self.client.post("/api/alerts", json=_alert())
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "open")
        self.assertEqual(body["date"], "2026-03-02")
        self.assertEqual(body["photos"], [])

    def test_short_description_is_rejected(self) -> None:
        response = self.client.post("/api/alerts", json=_alert(description="leak"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_lengths_are_checked_after_trimming(self) -> None:
        short_title = self.client.post("/api/alerts", json=_alert(title="   ab   "))
        self.assertEqual(short_title.status_code, 400)

        padded_description = self.client.post("/api/alerts", json=_alert(description="  wet floor  "))
        self.assertEqual(padded_description.status_code, 400)

        created = self.client.post("/api/alerts", json=_alert(title="  Water leak  ")).json()
        self.assertEqual(created["title"], "Water leak")

        short_update = self.client.put(f"/api/alerts/{created['id']}", json={"title": "  x  "})
        self.assertEqual(short_update.status_code, 400)

        trimmed_update = self.client.put(f"/api/alerts/{created['id']}", json={"site": "  Tower C "})
        self.assertEqual(trimmed_update.json()["site"], "Tower C")

    def test_too_many_photos_are_rejected(self) -> None:
        response = self.client.post("/api/alerts", json=_alert(photos=[f"p{i}.jpg" for i in range(6)]))
        self.assertEqual(response.status_code, 400)

    def test_status_update_and_filters(self) -> None:
        first = self.client.post("/api/alerts", json=_alert()).json()
        self.client.post("/api/alerts", json=_alert(title="Lift stuck", severity="critical", site="Tower B"))

        patched = self.client.patch(f"/api/alerts/{first['id']}/status", json={"status": "in-progress"})
        self.assertEqual(patched.json()["status"], "in-progress")

        by_status = self.client.get("/api/alerts", params={"status": "in-progress"}).json()
        self.assertEqual([item["id"] for item in by_status], [first["id"]])

        by_site = self.client.get("/api/alerts", params={"site": "Tower B"}).json()
        self.assertEqual([item["title"] for item in by_site], ["Lift stuck"])

        by_severity = self.client.get("/api/alerts", params={"severity": "critical"}).json()
        self.assertEqual(len(by_severity), 1)

    def test_update_keeps_unset_fields(self) -> None:
        created = self.client.post("/api/alerts", json=_alert()).json()
        response = self.client.put(
            f"/api/alerts/{created['id']}",
            json={"assigned_to": "Plumbing team", "photos": ["leak.jpg"]},
        )
        body = response.json()
        self.assertEqual(body["assigned_to"], "Plumbing team")
        self.assertEqual(body["photos"], ["leak.jpg"])
        self.assertEqual(body["title"], "Water leak")

    def test_stats(self) -> None:
        first = self.client.post("/api/alerts", json=_alert()).json()
        self.client.post("/api/alerts", json=_alert(severity="low"))
        self.client.patch(f"/api/alerts/{first['id']}/status", json={"status": "resolved"})

        stats = self.client.get("/api/alerts/stats/overview").json()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["by_status"], {"open": 1, "in-progress": 0, "resolved": 1})
        self.assertEqual(stats["by_severity"]["high"], 1)
        self.assertEqual(stats["by_severity"]["low"], 1)

    def test_delete_then_missing(self) -> None:
        created = self.client.post("/api/alerts", json=_alert()).json()
        self.assertEqual(self.client.delete(f"/api/alerts/{created['id']}").status_code, 204)

        missing = self.client.get(f"/api/alerts/{created['id']}")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"]["code"], "ALERT_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
