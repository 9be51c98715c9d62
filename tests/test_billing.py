from datetime import date, datetime, timedelta

import pytest

from juris.domain.invoices.service import InvoiceService, calculate_totals, mark_overdue_invoices
from juris.domain.time_entries.service import calculate_billable_amount, duration_in_minutes
from juris.models import TimeEntry
from juris.models_invoice import Invoice


def _invoice_payload(client_id: str, **overrides) -> dict:
    payload = {
        "client_id": client_id,
        "description": "Honoraires mars",
        "items": [
            {"description": "Consultation", "quantity": 2, "unit_price": 25000},
            {"description": "Rédaction de conclusions", "quantity": 1, "unit_price": 50000},
        ],
    }
    payload.update(overrides)
    return payload


# ============================================================================
# CALCULATIONS
# ============================================================================


class TestCalculations:
    def test_totals(self):
        items = [{"total_price": 50000}, {"total_price": 50000}]
        assert calculate_totals(items, 20) == {
            "subtotal": 100000,
            "tax_amount": 20000,
            "total_amount": 120000,
        }

    def test_totals_are_rounded(self):
        totals = calculate_totals([{"total_price": 10.005}], 18)
        assert totals["subtotal"] == round(10.005, 2)
        assert totals["total_amount"] == round(totals["subtotal"] + totals["tax_amount"], 2)

    def test_billable_amount(self):
        assert calculate_billable_amount(30000, 90) == 45000
        assert calculate_billable_amount(30000, 90, is_billable=False) == 0
        assert calculate_billable_amount(None, 90) == 0

    def test_duration(self):
        start = datetime(2025, 3, 5, 9, 0)
        assert duration_in_minutes(start, start + timedelta(hours=1, minutes=15)) == 75
        assert duration_in_minutes(start, start - timedelta(minutes=5)) == 0


# ============================================================================
# INVOICES
# ============================================================================


class TestInvoices:
    def test_create(self, api_client, law_client):
        response = api_client.post("/invoices", json=_invoice_payload(law_client.id))

        assert response.status_code == 201
        data = response.json()
        today = date.today()
        assert data["invoice_number"] == f"FACT-{today.year}-{today.month:02d}-001"
        assert data["subtotal"] == 100000
        assert data["tax_rate"] == 20
        assert data["tax_amount"] == 20000
        assert data["total_amount"] == 120000
        assert data["status"] == "draft"
        assert data["due_date"] == (today + timedelta(days=30)).isoformat()
        assert [item["total_price"] for item in data["items"]] == [50000, 50000]

    def test_numbers_are_sequential(self, api_client, law_client):
        api_client.post("/invoices", json=_invoice_payload(law_client.id))
        second = api_client.post("/invoices", json=_invoice_payload(law_client.id))
        assert second.json()["invoice_number"].endswith("-002")

    def test_numbers_past_the_padding(self, db_session, firm, law_client):
        for number in ("FACT-2026-10-999", "FACT-2026-10-1000"):
            db_session.add(Invoice(firm_id=firm.id, client_id=law_client.id, invoice_number=number))
        db_session.commit()

        service = InvoiceService(db_session)
        assert service.generate_invoice_number(date(2026, 10, 18)) == "FACT-2026-10-1001"

    def test_unknown_client(self, api_client):
        response = api_client.post("/invoices", json=_invoice_payload("missing"))
        assert response.status_code == 400

    def test_negative_price(self, api_client, law_client):
        payload = _invoice_payload(
            law_client.id, items=[{"description": "X", "quantity": 1, "unit_price": -1}]
        )
        assert api_client.post("/invoices", json=payload).status_code == 422

    def test_update_recomputes_totals(self, api_client, law_client):
        invoice_id = api_client.post("/invoices", json=_invoice_payload(law_client.id)).json()["id"]

        response = api_client.put(f"/invoices/{invoice_id}", json={"tax_rate": 0})

        assert response.status_code == 200
        assert response.json()["total_amount"] == 100000

        response = api_client.put(
            f"/invoices/{invoice_id}",
            json={"items": [{"description": "Forfait", "quantity": 1, "unit_price": 10000}]},
        )
        assert response.json()["subtotal"] == 10000
        assert len(response.json()["items"]) == 1

    def test_mark_paid_is_idempotent(self, api_client, law_client):
        invoice_id = api_client.post("/invoices", json=_invoice_payload(law_client.id)).json()["id"]

        first = api_client.post(
            f"/invoices/{invoice_id}/mark-paid",
            json={"payment_method": "cash", "payment_reference": "REC-001"},
        )
        second = api_client.post(f"/invoices/{invoice_id}/mark-paid", json={})

        assert first.status_code == 200
        assert first.json()["status"] == "paid"
        assert first.json()["paid_date"] == date.today().isoformat()
        assert second.json()["payment_reference"] == "REC-001"

    def test_paid_invoice_is_locked(self, api_client, law_client):
        invoice_id = api_client.post("/invoices", json=_invoice_payload(law_client.id)).json()["id"]
        api_client.post(f"/invoices/{invoice_id}/mark-paid", json={})

        assert api_client.put(f"/invoices/{invoice_id}", json={"notes": "x"}).status_code == 400
        assert api_client.delete(f"/invoices/{invoice_id}").status_code == 400

    def test_send_moves_draft_to_sent(self, api_client, law_client, sent_emails):
        invoice_id = api_client.post("/invoices", json=_invoice_payload(law_client.id)).json()["id"]

        response = api_client.post(f"/invoices/{invoice_id}/send", json={"channels": ["email"]})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "FACT-" in sent_emails[0]["subject"]
        assert api_client.get(f"/invoices/{invoice_id}").json()["status"] == "sent"

    def test_reminder_needs_a_sent_invoice(self, api_client, law_client):
        invoice_id = api_client.post("/invoices", json=_invoice_payload(law_client.id)).json()["id"]
        assert api_client.post(f"/invoices/{invoice_id}/remind").status_code == 400

    def test_overdue_sweep(self, db_session, firm, law_client):
        invoice = Invoice(
            firm_id=firm.id,
            client_id=law_client.id,
            invoice_number="FACT-2025-01-001",
            status="sent",
            issue_date=date(2025, 1, 2),
            due_date=date(2025, 2, 1),
        )
        draft = Invoice(
            firm_id=firm.id,
            client_id=law_client.id,
            invoice_number="FACT-2025-01-002",
            status="draft",
            due_date=date(2025, 2, 1),
        )
        db_session.add_all([invoice, draft])
        db_session.commit()

        assert mark_overdue_invoices(db_session, today=date(2025, 2, 2)) == 1
        assert invoice.status == "overdue"
        assert draft.status == "draft"


# ============================================================================
# TIME TRACKING
# ============================================================================


class TestTimeEntries:
    def test_manual_entry_uses_case_rate(self, api_client, case):
        response = api_client.post(
            "/time-entries",
            json={
                "case_id": case.id,
                "start_time": "2025-03-05T09:00:00",
                "end_time": "2025-03-05T10:30:00",
                "description": "Préparation audience",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["duration_minutes"] == 90
        assert data["hourly_rate"] == 30000
        assert data["billable_amount"] == 45000

    def test_entry_rate_overrides_case_rate(self, api_client, case):
        response = api_client.post(
            "/time-entries",
            json={
                "case_id": case.id,
                "start_time": "2025-03-05T09:00:00",
                "duration_minutes": 45,
                "hourly_rate": 20000,
            },
        )
        assert response.json()["billable_amount"] == 15000

    def test_non_billable(self, api_client, case):
        response = api_client.post(
            "/time-entries",
            json={
                "case_id": case.id,
                "start_time": "2025-03-05T09:00:00",
                "duration_minutes": 60,
                "is_billable": False,
            },
        )
        assert response.json()["billable_amount"] == 0

    def test_period_required(self, api_client, case):
        response = api_client.post(
            "/time-entries", json={"case_id": case.id, "start_time": "2025-03-05T09:00:00"}
        )
        assert response.status_code == 422

    def test_single_running_timer(self, api_client, case):
        started = api_client.post("/time-entries/start", json={"case_id": case.id})
        assert started.status_code == 201
        assert started.json()["end_time"] is None

        again = api_client.post("/time-entries/start", json={"case_id": case.id})
        assert again.status_code == 400

        running = api_client.get("/time-entries/running").json()
        assert running["id"] == started.json()["id"]

        stopped = api_client.post(f"/time-entries/{running['id']}/stop", json={"description": "Appel"})
        assert stopped.status_code == 200
        assert stopped.json()["end_time"] is not None
        assert stopped.json()["description"] == "Appel"

        assert api_client.post(f"/time-entries/{running['id']}/stop", json={}).status_code == 400

    def test_time_tracking_needs_premium(self, api_client, basic_firm, case):
        response = api_client.get("/time-entries")
        assert response.status_code == 403
        assert response.headers["X-Plan-Required"] == "true"

    def test_summary(self, api_client, case):
        for minutes in (60, 30):
            api_client.post(
                "/time-entries",
                json={"case_id": case.id, "start_time": "2025-03-05T09:00:00", "duration_minutes": minutes},
            )

        summary = api_client.get("/time-entries/summary", params={"case_id": case.id}).json()

        assert summary["total_entries"] == 2
        assert summary["total_minutes"] == 90
        assert summary["total_hours"] == 1.5
        assert summary["billable_amount"] == 45000
        assert summary["billed_amount"] == 0
        assert summary["unbilled_amount"] == 45000


# ============================================================================
# INVOICING TIME
# ============================================================================


class TestInvoiceFromTimeEntries:
    @pytest.fixture
    def entries(self, api_client, case):
        for minutes in (90, 30):
            api_client.post(
                "/time-entries",
                json={"case_id": case.id, "start_time": "2025-03-05T09:00:00", "duration_minutes": minutes},
            )

    def test_bills_unbilled_entries(self, api_client, case, entries, db_session):
        response = api_client.post("/invoices/from-time-entries", json={"case_id": case.id})

        assert response.status_code == 201
        data = response.json()
        assert data["client_id"] == case.client_id
        assert data["subtotal"] == 60000
        assert data["tax_amount"] == 12000
        assert data["total_amount"] == 72000
        assert len(data["items"]) == 2
        assert all(e.invoice_id == data["id"] for e in db_session.query(TimeEntry).all())

        summary = api_client.get("/time-entries/summary").json()
        assert summary["billed_amount"] == 60000
        assert summary["unbilled_amount"] == 0

    def test_nothing_left_to_bill(self, api_client, case, entries):
        api_client.post("/invoices/from-time-entries", json={"case_id": case.id})
        again = api_client.post("/invoices/from-time-entries", json={"case_id": case.id})
        assert again.status_code == 400

    def test_billed_entries_are_locked(self, api_client, case, entries):
        api_client.post("/invoices/from-time-entries", json={"case_id": case.id})
        entry_id = api_client.get("/time-entries").json()[0]["id"]

        assert api_client.put(f"/time-entries/{entry_id}", json={"duration_minutes": 5}).status_code == 400
        assert api_client.delete(f"/time-entries/{entry_id}").status_code == 400

    def test_deleting_invoice_releases_entries(self, api_client, case, entries):
        invoice_id = api_client.post(
            "/invoices/from-time-entries", json={"case_id": case.id}
        ).json()["id"]

        assert api_client.delete(f"/invoices/{invoice_id}").status_code == 200
        assert api_client.get("/time-entries", params={"billed": False}).json() != []
        assert api_client.get("/time-entries", params={"billed": True}).json() == []
