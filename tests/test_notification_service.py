import asyncio

import pytest

from juris.models import Communication
from juris.models_notification import Notification
from juris.services.notification_service import (
    NOTIFICATION_TEMPLATES,
    list_templates,
    missing_required_data,
    process_template,
    render_message,
    send_notification,
)


class TestTemplates:
    def test_placeholders_are_replaced(self):
        assert process_template("Bonjour {{clientName}}", {"clientName": "Awa"}) == "Bonjour Awa"

    def test_unknown_placeholders_are_kept(self):
        assert process_template("{{a}} {{b}}", {"a": 1}) == "1 {{b}}"

    def test_missing_required_data(self):
        missing = missing_required_data("document_ready", {"clientName": "Awa"})
        assert missing == ["documentName", "firmName"]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            missing_required_data("birthday", {})

    def test_render_message_prefers_explicit_message(self):
        assert render_message("payment_reminder", {"message": "Payez"}) == "Payez"

    def test_render_message_uses_short_text(self):
        text = render_message(
            "document_ready",
            {"clientName": "Awa", "documentName": "Contrat", "firmName": "Cabinet Diop"},
        )
        assert "Contrat" in text
        assert "{{" not in text

    def test_list_templates(self):
        types = {template["type"] for template in list_templates()}
        assert types == set(NOTIFICATION_TEMPLATES)


class TestSendNotification:
    def test_in_app_only(self, db_session, firm):
        result = asyncio.run(
            send_notification(
                db_session,
                firm.id,
                "subscription_renewed",
                channels=["in_app"],
                recipients=[{"name": firm.firm_name}],
                data={"planName": "premium", "expirationDate": "30/11/2025"},
            )
        )

        assert result["success"] is True
        assert len(result["results"]) == 1
        assert result["results"][0]["channel"] == "in_app"

        notification = db_session.query(Notification).filter_by(id=result["notification_id"]).one()
        assert notification.status == "sent"
        assert notification.title == "Abonnement renouvelé"
        assert notification.read is False

    def test_email_is_logged(self, db_session, firm, sent_emails):
        result = asyncio.run(
            send_notification(
                db_session,
                firm.id,
                "welcome",
                channels=["email"],
                recipients=[{"email": "awa@example.sn", "name": "Awa"}],
                data={"clientName": "Awa", "firmName": "Cabinet Diop"},
            )
        )

        assert result["success"] is True
        assert sent_emails[0]["subject"] == "Bienvenue chez Cabinet Diop"
        communication = db_session.query(Communication).one()
        assert communication.type == "email"
        assert communication.status == "sent"
        assert communication.external_id == "email_1"

    def test_disabled_email_fails_without_raising(self, db_session, firm):
        result = asyncio.run(
            send_notification(
                db_session,
                firm.id,
                "welcome",
                channels=["email"],
                recipients=[{"email": "awa@example.sn", "name": "Awa"}],
                data={"clientName": "Awa", "firmName": "Cabinet Diop"},
            )
        )

        assert result["success"] is False
        assert "disabled" in result["results"][0]["error"]
        notification = db_session.query(Notification).one()
        assert notification.status == "failed"

    def test_channels_without_template_are_skipped(self, db_session, firm):
        # welcome has no WhatsApp text
        result = asyncio.run(
            send_notification(
                db_session,
                firm.id,
                "welcome",
                channels=["whatsapp"],
                recipients=[{"phone": "+221770000001", "name": "Awa"}],
                data={"clientName": "Awa", "firmName": "Cabinet Diop"},
            )
        )
        assert result == {
            "success": True,
            "results": [],
            "notification_id": result["notification_id"],
        }
