from datetime import date, datetime, timedelta

import pytest

from juris.domain.documents import service as document_service
from juris.models import CalendarEvent, Document
from juris.models_invoice import Invoice


# ============================================================================
# DASHBOARD
# ============================================================================


class TestDashboardStats:
    def test_stats(self, api_client, db_session, firm, case, law_client):
        now = datetime.utcnow()
        db_session.add_all(
            [
                CalendarEvent(
                    firm_id=firm.id,
                    case_id=case.id,
                    title="Dépôt des conclusions",
                    event_type="deadline",
                    start_time=now + timedelta(days=3),
                ),
                Invoice(
                    firm_id=firm.id,
                    client_id=law_client.id,
                    invoice_number="FACT-X-001",
                    total_amount=120000,
                    status="paid",
                    paid_date=date.today(),
                ),
            ]
        )
        db_session.commit()

        response = api_client.get("/dashboard/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total_clients"] == 1
        assert data["total_cases"] == 1
        assert data["active_cases"] == 1
        assert data["upcoming_deadlines"] == 1
        assert data["deadlines"][0]["title"] == "Dépôt des conclusions"
        assert data["monthly_revenue"] == 120000
        assert data["recent_cases"][0]["id"] == case.id
        assert data["subscription"]["plan"] == "premium"
        assert data["usage"]["clients"]["used"] == 1
        assert data["usage"]["cases"]["limit"] == 500

    def test_empty_firm(self, api_client):
        data = api_client.get("/dashboard/stats").json()
        assert data["total_clients"] == 0
        assert data["monthly_revenue"] == 0
        assert data["deadlines"] == []


class TestSearch:
    def test_search_across_scopes(self, api_client, case, law_client):
        response = api_client.post("/search", json={"query": "ndiaye"})

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["cases"]] == [case.id]
        assert [c["id"] for c in data["clients"]] == [law_client.id]
        assert data["total"] == 2

    def test_filters(self, api_client, case):
        response = api_client.post(
            "/search", json={"scopes": ["cases"], "status": "closed"}
        )
        assert response.json()["total"] == 0

    def test_unknown_scope(self, api_client):
        response = api_client.post("/search", json={"query": "x", "scopes": ["invoices"]})
        assert response.status_code == 422

    def test_needs_premium(self, api_client, basic_firm):
        response = api_client.post("/search", json={"query": "x"})
        assert response.status_code == 403


class TestExport:
    def test_clients_csv(self, api_client, law_client):
        response = api_client.post(
            "/export", json={"entity": "clients", "fields": ["last_name", "email"]}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0] == "id,last_name,email"
        assert lines[1] == f"{law_client.id},Ndiaye,awa.ndiaye@example.sn"

    def test_invoice_date_range(self, api_client, db_session, firm, law_client):
        db_session.add_all(
            [
                Invoice(
                    firm_id=firm.id,
                    client_id=law_client.id,
                    invoice_number="FACT-2025-01-001",
                    issue_date=date(2025, 1, 15),
                ),
                Invoice(
                    firm_id=firm.id,
                    client_id=law_client.id,
                    invoice_number="FACT-2025-03-001",
                    issue_date=date(2025, 3, 15),
                ),
            ]
        )
        db_session.commit()

        response = api_client.post(
            "/export",
            json={
                "entity": "invoices",
                "fields": ["invoice_number"],
                "start_date": "2025-03-01",
                "end_date": "2025-03-31",
            },
        )

        lines = response.text.strip().splitlines()
        assert len(lines) == 2
        assert lines[1].endswith("FACT-2025-03-001")

    def test_unknown_field(self, api_client):
        response = api_client.post("/export", json={"entity": "clients", "fields": ["password"]})
        assert response.status_code == 400

    def test_unknown_entity(self, api_client):
        assert api_client.post("/export", json={"entity": "profiles"}).status_code == 422

    def test_needs_premium(self, api_client, basic_firm):
        assert api_client.post("/export", json={"entity": "clients"}).status_code == 403


# ============================================================================
# DOCUMENTS
# ============================================================================


@pytest.fixture
def storage(monkeypatch):
    """Replace R2 presigning and deletion"""
    deleted = []
    monkeypatch.setattr(
        document_service, "generate_upload_url", lambda key, content_type=None: f"https://r2/upload/{key}"
    )
    monkeypatch.setattr(
        document_service, "generate_download_url", lambda key, filename=None: f"https://r2/download/{key}"
    )

    def fake_delete(key):
        deleted.append(key)
        return True

    monkeypatch.setattr(document_service, "delete_document_object", fake_delete)
    return deleted


class TestDocuments:
    def test_create_with_upload_url(self, api_client, case, firm, storage):
        response = api_client.post(
            "/documents",
            json={
                "name": "Assignation",
                "file_name": "assignation (1).pdf",
                "file_type": "application/pdf",
                "file_size": 2048,
                "case_id": case.id,
            },
        )

        assert response.status_code == 201
        document = response.json()["document"]
        assert document["version"] == 1
        assert document["file_path"].startswith(f"documents/{firm.id}/{document['id']}/v1_")
        assert document["file_path"].endswith("_assignation1.pdf")
        assert response.json()["upload_url"] == f"https://r2/upload/{document['file_path']}"

    def test_metadata_only(self, api_client, storage):
        response = api_client.post("/documents", json={"name": "Note interne"})
        assert response.json()["upload_url"] is None

    def test_unknown_case(self, api_client, storage):
        response = api_client.post("/documents", json={"name": "X", "case_id": "nope"})
        assert response.status_code == 400

    def test_invalid_confidentiality(self, api_client):
        response = api_client.post(
            "/documents", json={"name": "X", "confidentiality_level": "top_secret"}
        )
        assert response.status_code == 422

    def test_new_version(self, api_client, storage):
        document_id = api_client.post(
            "/documents", json={"name": "Contrat", "file_name": "contrat.pdf"}
        ).json()["document"]["id"]

        response = api_client.post(
            f"/documents/{document_id}/versions", json={"file_name": "contrat_v2.pdf"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["document"]["version"] == 2
        assert "/v2_" in data["document"]["file_path"]
        assert data["upload_url"].endswith("contrat_v2.pdf")

    def test_download(self, api_client, storage):
        with_file = api_client.post(
            "/documents", json={"name": "Contrat", "file_name": "contrat.pdf"}
        ).json()["document"]
        without_file = api_client.post("/documents", json={"name": "Vide"}).json()["document"]

        response = api_client.get(f"/documents/{with_file['id']}/download")
        assert response.json()["url"] == f"https://r2/download/{with_file['file_path']}"

        assert api_client.get(f"/documents/{without_file['id']}/download").status_code == 404

    def test_delete_removes_file(self, api_client, db_session, storage):
        document = api_client.post(
            "/documents", json={"name": "Contrat", "file_name": "contrat.pdf"}
        ).json()["document"]

        assert api_client.delete(f"/documents/{document['id']}").status_code == 200
        assert storage == [document["file_path"]]
        assert db_session.query(Document).count() == 0

    def test_search(self, api_client, storage):
        api_client.post("/documents", json={"name": "Jugement TGI"})
        api_client.post("/documents", json={"name": "Procuration"})

        names = [d["name"] for d in api_client.get("/documents", params={"search": "jugement"}).json()]
        assert names == ["Jugement TGI"]

    def test_document_quota_on_basic_plan(self, api_client, basic_firm, db_session, storage):
        for i in range(50):
            db_session.add(Document(firm_id=basic_firm.id, name=f"Doc {i}"))
        db_session.commit()

        response = api_client.post("/documents", json={"name": "Un de trop"})
        assert response.status_code == 403

    def test_notify_ready(self, api_client, case, storage, sent_emails):
        document_id = api_client.post(
            "/documents", json={"name": "Jugement", "case_id": case.id}
        ).json()["document"]["id"]

        response = api_client.post(
            f"/documents/{document_id}/notify-ready", json={"channels": ["email"]}
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert sent_emails[0]["to"] == "awa.ndiaye@example.sn"

    def test_notify_needs_a_client(self, api_client, storage):
        document_id = api_client.post("/documents", json={"name": "Orphelin"}).json()["document"]["id"]

        response = api_client.post(f"/documents/{document_id}/notify-ready", json={"channels": ["email"]})
        assert response.status_code == 400
