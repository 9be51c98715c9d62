import asyncio
from datetime import datetime, timedelta

import pytest

from juris.domain.calendar import service as calendar_service
from juris.domain.calendar.service import reminder_due, send_due_reminders
from juris.models import CalendarEvent, Communication
from juris.models_notification import Notification


# ============================================================================
# CALENDAR
# ============================================================================


class TestCalendarEvents:
    def test_create_and_list(self, api_client, case):
        response = api_client.post(
            "/calendar/events",
            json={
                "title": "Audience TGI Dakar",
                "event_type": "hearing",
                "start_time": "2025-04-10T09:00:00",
                "end_time": "2025-04-10T11:00:00",
                "case_id": case.id,
            },
        )

        assert response.status_code == 201
        events = api_client.get(
            "/calendar/events",
            params={"start": "2025-04-01T00:00:00", "end": "2025-04-30T00:00:00"},
        ).json()
        assert [e["title"] for e in events] == ["Audience TGI Dakar"]

    def test_end_before_start(self, api_client):
        response = api_client.post(
            "/calendar/events",
            json={
                "title": "X",
                "start_time": "2025-04-10T09:00:00",
                "end_time": "2025-04-10T08:00:00",
            },
        )
        assert response.status_code == 422

    def test_unknown_event_type(self, api_client):
        response = api_client.post(
            "/calendar/events",
            json={"title": "X", "event_type": "party", "start_time": "2025-04-10T09:00:00"},
        )
        assert response.status_code == 422

    def test_rescheduling_resets_reminder(self, api_client, db_session, firm):
        event = CalendarEvent(
            firm_id=firm.id,
            title="RDV",
            start_time=datetime(2025, 4, 10, 9, 0),
            reminder_sent_at=datetime(2025, 4, 10, 8, 30),
        )
        db_session.add(event)
        db_session.commit()

        response = api_client.put(
            f"/calendar/events/{event.id}", json={"start_time": "2025-04-11T09:00:00"}
        )

        assert response.status_code == 200
        assert response.json()["reminder_sent_at"] is None

    def test_upcoming(self, api_client, db_session, firm):
        now = datetime.utcnow()
        db_session.add_all(
            [
                CalendarEvent(firm_id=firm.id, title="Passé", start_time=now - timedelta(days=1)),
                CalendarEvent(firm_id=firm.id, title="Demain", start_time=now + timedelta(days=1)),
            ]
        )
        db_session.commit()

        titles = [e["title"] for e in api_client.get("/calendar/upcoming").json()]
        assert titles == ["Demain"]


class TestAppointmentReminders:
    @pytest.fixture
    def reminders(self, monkeypatch):
        calls = []

        async def fake_reminder(db, firm_id, **kwargs):
            calls.append(kwargs)
            return {"success": True}

        monkeypatch.setattr(calendar_service, "send_appointment_reminder", fake_reminder)
        return calls

    @pytest.fixture
    def appointment(self, db_session, firm, law_client):
        event = CalendarEvent(
            firm_id=firm.id,
            client_id=law_client.id,
            title="Consultation",
            event_type="appointment",
            start_time=datetime(2025, 4, 10, 15, 0),
            reminder_minutes=60,
        )
        db_session.add(event)
        db_session.commit()
        return event

    def test_reminder_window(self, appointment):
        assert reminder_due(appointment, datetime(2025, 4, 10, 13, 59)) is False
        assert reminder_due(appointment, datetime(2025, 4, 10, 14, 0)) is True
        assert reminder_due(appointment, datetime(2025, 4, 10, 15, 0)) is False

    def test_sent_once(self, db_session, appointment, reminders):
        now = datetime(2025, 4, 10, 14, 30)

        first = asyncio.run(send_due_reminders(db_session, now))
        second = asyncio.run(send_due_reminders(db_session, now))

        assert first == {"checked": 1, "sent": 1, "skipped": 0}
        assert second["sent"] == 0
        assert reminders[0]["client_name"] == "Awa Ndiaye"
        assert reminders[0]["appointment_time"] == "15:00"
        assert appointment.reminder_sent_at == now

    def test_too_early(self, db_session, appointment, reminders):
        result = asyncio.run(send_due_reminders(db_session, datetime(2025, 4, 10, 9, 0)))
        assert result["sent"] == 0
        assert reminders == []

    def test_blocked_firm_is_skipped(self, db_session, firm, appointment, reminders):
        firm.subscription_expires_at = datetime.utcnow() - timedelta(days=10)
        db_session.commit()

        result = asyncio.run(send_due_reminders(db_session, datetime(2025, 4, 10, 14, 30)))

        assert result["skipped"] == 1
        assert reminders == []


# ============================================================================
# COMMUNICATIONS
# ============================================================================


class TestCommunications:
    def test_log_phone_call(self, api_client, law_client):
        response = api_client.post(
            "/communications",
            json={
                "type": "phone",
                "direction": "inbound",
                "content": "Appel au sujet de l'audience",
                "client_id": law_client.id,
            },
        )

        assert response.status_code == 201
        listed = api_client.get("/communications", params={"client_id": law_client.id}).json()
        assert len(listed) == 1
        assert listed[0]["type"] == "phone"

    def test_send_email_to_client(self, api_client, law_client, sent_emails, db_session):
        response = api_client.post(
            "/communications/send",
            json={
                "type": "email",
                "subject": "Pièces manquantes",
                "content": "Merci de nous transmettre <votre> pièce d'identité.",
                "client_id": law_client.id,
            },
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert sent_emails[0]["to"] == law_client.email
        assert "&lt;votre&gt;" in sent_emails[0]["content"]
        assert db_session.query(Communication).one().status == "sent"

    def test_email_needs_subject(self, api_client, law_client):
        response = api_client.post(
            "/communications/send",
            json={"type": "email", "content": "Bonjour", "client_id": law_client.id},
        )
        assert response.status_code == 400

    def test_no_recipient(self, api_client):
        response = api_client.post("/communications/send", json={"type": "sms", "content": "Bonjour"})
        assert response.status_code == 400

    def test_sms_needs_premium(self, api_client, basic_firm):
        response = api_client.post(
            "/communications/send",
            json={"type": "sms", "content": "Bonjour", "to": "+221770000001"},
        )
        assert response.status_code == 403

    def test_cannot_send_letters(self, api_client):
        response = api_client.post(
            "/communications/send", json={"type": "letter", "content": "x", "to": "x"}
        )
        assert response.status_code == 422


# ============================================================================
# CONTACTS
# ============================================================================


class TestContacts:
    def test_crud(self, api_client):
        created = api_client.post(
            "/contacts",
            json={
                "first_name": "Ibrahima",
                "last_name": "Fall",
                "contact_type": "bailiff",
                "phone": "776665544",
            },
        )
        assert created.status_code == 201
        contact_id = created.json()["id"]
        assert created.json()["phone"] == "+221776665544"

        listed = api_client.get("/contacts", params={"contact_type": "bailiff"}).json()
        assert [c["id"] for c in listed] == [contact_id]

        updated = api_client.put(f"/contacts/{contact_id}", json={"status": "inactive"})
        assert updated.json()["status"] == "inactive"

        assert api_client.delete(f"/contacts/{contact_id}").status_code == 200
        assert api_client.get(f"/contacts/{contact_id}").status_code == 404

    def test_invalid_type(self, api_client):
        response = api_client.post(
            "/contacts", json={"first_name": "A", "last_name": "B", "contact_type": "wizard"}
        )
        assert response.status_code == 422


# ============================================================================
# NOTIFICATION CENTER
# ============================================================================


class TestNotificationCenter:
    def test_send_and_read(self, api_client, db_session):
        response = api_client.post(
            "/notifications/send",
            json={
                "type": "case_update",
                "channels": ["in_app"],
                "recipients": [{"name": "Awa Ndiaye"}],
                "data": {"clientName": "Awa Ndiaye", "caseTitle": "Litige", "update": "Audience fixée"},
            },
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        notification = db_session.query(Notification).one()
        assert notification.extra_data["firmName"] == "Cabinet Diop & Associés"

        assert api_client.get("/notifications/unread-count").json() == {"unread": 1}
        api_client.post(f"/notifications/{notification.id}/read")
        assert api_client.get("/notifications/unread-count").json() == {"unread": 0}

    def test_mark_all_read_and_delete(self, api_client, db_session, firm):
        for _ in range(2):
            db_session.add(
                Notification(firm_id=firm.id, type="welcome", title="Bienvenue", channel="in_app")
            )
        db_session.commit()

        assert api_client.post("/notifications/mark-all-read").json()["updated"] == 2

        notification_id = api_client.get("/notifications").json()[0]["id"]
        assert api_client.delete(f"/notifications/{notification_id}").status_code == 200
        assert len(api_client.get("/notifications").json()) == 1

    def test_unknown_type(self, api_client):
        response = api_client.post(
            "/notifications/send",
            json={"type": "birthday", "channels": ["in_app"], "recipients": []},
        )
        assert response.status_code == 422

    def test_templates(self, api_client):
        templates = api_client.get("/notifications/templates").json()
        assert "appointment_reminder" in {t["type"] for t in templates}
