from datetime import datetime, timedelta

from juris.domain.cases.service import CaseService
from juris.models import Case, Client


# ============================================================================
# CLIENTS
# ============================================================================


class TestClients:
    def test_create_normalizes_contact_details(self, api_client):
        response = api_client.post(
            "/clients",
            json={
                "first_name": "Moussa",
                "last_name": "Sow",
                "email": "Moussa.Sow@Example.SN",
                "phone": "77 555 44 33",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["full_name"] == "Moussa Sow"
        assert data["email"] == "moussa.sow@example.sn"
        assert data["phone"] == "+221775554433"
        assert data["client_type"] == "individual"
        assert data["status"] == "active"

    def test_invalid_client_type(self, api_client):
        response = api_client.post(
            "/clients", json={"first_name": "A", "last_name": "B", "client_type": "robot"}
        )
        assert response.status_code == 422

    def test_search(self, api_client, law_client):
        response = api_client.get("/clients", params={"search": "ndia"})
        assert [c["id"] for c in response.json()] == [law_client.id]

        response = api_client.get("/clients", params={"search": "nobody"})
        assert response.json() == []

    def test_clients_of_other_firms_are_hidden(self, api_client, db_session, firm):
        from juris.models import Profile

        other = Profile(id="other-firm", firm_name="Autre Cabinet")
        db_session.add(other)
        db_session.commit()
        stranger = Client(firm_id=other.id, first_name="X", last_name="Y")
        db_session.add(stranger)
        db_session.commit()

        assert api_client.get(f"/clients/{stranger.id}").status_code == 404
        assert api_client.get("/clients").json() == []

    def test_update(self, api_client, law_client):
        response = api_client.put(f"/clients/{law_client.id}", json={"status": "archived"})
        assert response.status_code == 200
        assert response.json()["status"] == "archived"

    def test_delete_client_with_cases_is_refused(self, api_client, case, law_client):
        response = api_client.delete(f"/clients/{law_client.id}")
        assert response.status_code == 400

    def test_delete(self, api_client, law_client, db_session):
        response = api_client.delete(f"/clients/{law_client.id}")
        assert response.status_code == 200
        assert db_session.query(Client).count() == 0

    def test_export_csv(self, api_client, law_client):
        response = api_client.get("/clients/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("ID,First Name,Last Name")
        assert "Ndiaye" in lines[1]

    def test_export_needs_premium(self, api_client, basic_firm, law_client):
        response = api_client.get("/clients/export")
        assert response.status_code == 403

    def test_quota_reached_on_basic_plan(self, api_client, basic_firm, db_session):
        for i in range(25):
            db_session.add(Client(firm_id=basic_firm.id, first_name=f"Client{i}", last_name="Test"))
        db_session.commit()

        response = api_client.post("/clients", json={"first_name": "Trop", "last_name": "Tard"})

        assert response.status_code == 403
        assert response.headers["X-Plan-Required"] == "true"
        assert "25/25" in response.json()["detail"]

    def test_welcome_email(self, api_client, law_client, sent_emails):
        response = api_client.post(f"/clients/{law_client.id}/welcome")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert sent_emails[0]["to"] == law_client.email


# ============================================================================
# ACCESS BLOCKING
# ============================================================================


class TestAccessBlocking:
    def test_overdue_firm_is_blocked(self, api_client, firm, db_session):
        firm.subscription_expires_at = datetime.utcnow() - timedelta(days=10)
        db_session.commit()

        response = api_client.get("/clients")

        assert response.status_code == 402
        assert response.headers["X-Payment-Required"] == "true"

    def test_subscription_pages_stay_reachable(self, api_client, firm, db_session):
        firm.subscription_expires_at = datetime.utcnow() - timedelta(days=10)
        db_session.commit()

        assert api_client.get("/subscription/status").status_code == 200
        assert api_client.get("/payments/methods").status_code == 200

    def test_grace_period_keeps_access(self, api_client, firm, db_session):
        firm.subscription_expires_at = datetime.utcnow() - timedelta(days=1, hours=2)
        db_session.commit()

        assert api_client.get("/clients").status_code == 200


# ============================================================================
# CASES
# ============================================================================


class TestCases:
    def test_case_numbers_are_sequential(self, api_client, law_client):
        year = datetime.utcnow().year
        first = api_client.post("/cases", json={"title": "Divorce Sow", "client_id": law_client.id})
        second = api_client.post("/cases", json={"title": "Succession Sow"})

        assert first.status_code == 201
        assert first.json()["case_number"] == f"CASE-{year}-0001"
        assert second.json()["case_number"] == f"CASE-{year}-0002"
        assert first.json()["start_date"] is not None

    def test_numbers_past_the_padding(self, db_session, firm):
        for number in ("CASE-2026-9999", "CASE-2026-10000"):
            db_session.add(Case(firm_id=firm.id, case_number=number, title="Dossier"))
        db_session.commit()

        assert CaseService(db_session).generate_case_number(2026) == "CASE-2026-10001"

    def test_unknown_client(self, api_client):
        response = api_client.post("/cases", json={"title": "Orphelin", "client_id": "nope"})
        assert response.status_code == 400

    def test_invalid_priority(self, api_client):
        response = api_client.post("/cases", json={"title": "X", "priority": "asap"})
        assert response.status_code == 422

    def test_negative_rate(self, api_client):
        response = api_client.post("/cases", json={"title": "X", "hourly_rate": -5})
        assert response.status_code == 422

    def test_closing_stamps_end_date(self, api_client, case):
        response = api_client.put(f"/cases/{case.id}", json={"status": "won"})

        assert response.status_code == 200
        assert response.json()["actual_end_date"] is not None

    def test_filter_by_status(self, api_client, case):
        assert len(api_client.get("/cases", params={"status": "open"}).json()) == 1
        assert api_client.get("/cases", params={"status": "closed"}).json() == []

    def test_delete(self, api_client, case, db_session):
        assert api_client.delete(f"/cases/{case.id}").status_code == 200
        assert db_session.query(Case).count() == 0

    def test_notify_client_needs_premium_for_whatsapp(self, api_client, basic_firm, case):
        response = api_client.post(
            f"/cases/{case.id}/notify",
            json={"update": "Audience reportée", "channels": ["whatsapp"]},
        )
        assert response.status_code == 403

    def test_notify_client(self, api_client, case, sent_emails):
        response = api_client.post(
            f"/cases/{case.id}/notify",
            json={"update": "Audience fixée au 12 mars", "channels": ["email"]},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert case.title in sent_emails[0]["subject"]
