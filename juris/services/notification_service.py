"""
Unified Notification Service
Renders notification templates and dispatches them over email, WhatsApp, SMS and in-app
from the same event source
"""

import logging
import re
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..email_service import deliver_email
from ..email_templates import notification_email_template
from ..models_notification import Notification
from .sms_service import send_sms
from .whatsapp_service import send_whatsapp_message

logger = logging.getLogger(__name__)

NOTIFICATION_CHANNELS = ("email", "whatsapp", "sms", "in_app")

NOTIFICATION_TITLES = {
    "appointment_reminder": "Rappel de rendez-vous",
    "case_update": "Mise à jour de dossier",
    "payment_reminder": "Rappel de paiement",
    "document_ready": "Document prêt",
    "welcome": "Bienvenue",
    "subscription_expiring": "Abonnement bientôt expiré",
    "subscription_expired": "Abonnement expiré",
    "subscription_renewed": "Abonnement renouvelé",
    "invoice_sent": "Facture envoyée",
    "payment_received": "Paiement reçu",
    "payment_overdue_critical": "Paiement en retard critique",
    "payment_successful": "Paiement confirmé",
}

NOTIFICATION_TEMPLATES = {
    "appointment_reminder": {
        "name": "Rappel de rendez-vous",
        "description": "Rappel automatique de rendez-vous",
        "channels": ["email", "whatsapp", "sms"],
        "required_data": ["clientName", "appointmentDate", "appointmentTime", "firmName"],
        "email": {
            "subject": "Rappel - Rendez-vous du {{appointmentDate}}",
            "body": (
                "<p>Bonjour {{clientName}},</p>"
                "<p>Nous vous rappelons que vous avez un rendez-vous le "
                "<strong>{{appointmentDate}} à {{appointmentTime}}</strong>.</p>"
                "<p><strong>Cabinet :</strong> {{firmName}}</p>"
                "<p>Merci de confirmer votre présence.</p>"
                "<p>Cordialement,<br>L'équipe de {{firmName}}</p>"
            ),
        },
        "whatsapp": {
            "text": "Bonjour {{clientName}}, rappel de votre rendez-vous le {{appointmentDate}} à "
            "{{appointmentTime}}. Merci de confirmer votre présence. - {{firmName}}"
        },
        "sms": {
            "text": "Rappel: RDV le {{appointmentDate}} à {{appointmentTime}}. Confirmez SVP. {{firmName}}"
        },
    },
    "case_update": {
        "name": "Mise à jour de dossier",
        "description": "Notification de mise à jour de dossier",
        "channels": ["email", "whatsapp"],
        "required_data": ["clientName", "caseTitle", "update", "firmName"],
        "email": {
            "subject": "Mise à jour de votre dossier : {{caseTitle}}",
            "body": (
                "<p>Bonjour {{clientName}},</p>"
                "<p>Mise à jour concernant votre dossier <strong>{{caseTitle}}</strong> :</p>"
                "<p>{{update}}</p>"
                "<p>Pour toute question, n'hésitez pas à nous contacter.</p>"
                "<p>Cordialement,<br>L'équipe de {{firmName}}</p>"
            ),
        },
        "whatsapp": {
            "text": 'Bonjour {{clientName}}, mise à jour de votre dossier "{{caseTitle}}": {{update}} - {{firmName}}'
        },
    },
    "payment_reminder": {
        "name": "Rappel de paiement",
        "description": "Rappel de paiement de facture",
        "channels": ["email", "whatsapp", "sms"],
        "required_data": ["clientName", "invoiceNumber", "amount", "dueDate", "firmName"],
        "email": {
            "subject": "Rappel de paiement - Facture N° {{invoiceNumber}}",
            "body": (
                "<p>Bonjour {{clientName}},</p>"
                "<p>Nous vous rappelons qu'une facture est en attente de paiement :</p>"
                "<p><strong>Facture N° {{invoiceNumber}}</strong><br>"
                "Montant : {{amount}}<br>Date d'échéance : {{dueDate}}</p>"
                "<p>Merci de procéder au règlement dans les plus brefs délais.</p>"
                "<p>Cordialement,<br>L'équipe de {{firmName}}</p>"
            ),
        },
        "whatsapp": {
            "text": "Bonjour {{clientName}}, rappel de paiement pour la facture N° {{invoiceNumber}} "
            "({{amount}}) échéance {{dueDate}}. Merci de régler. - {{firmName}}"
        },
        "sms": {
            "text": "Rappel paiement facture {{invoiceNumber}} ({{amount}}) échéance {{dueDate}}. {{firmName}}"
        },
    },
    "document_ready": {
        "name": "Document prêt",
        "description": "Notification de document prêt",
        "channels": ["email", "whatsapp"],
        "required_data": ["clientName", "documentName", "firmName"],
        "email": {
            "subject": "Votre document est prêt : {{documentName}}",
            "body": '<p>Bonjour {{clientName}}, votre document "{{documentName}}" est prêt. - {{firmName}}</p>',
        },
        "whatsapp": {
            "text": 'Bonjour {{clientName}}, votre document "{{documentName}}" est prêt. '
            "Vous pouvez venir le récupérer. - {{firmName}}"
        },
    },
    "welcome": {
        "name": "Bienvenue",
        "description": "Message de bienvenue pour nouveaux clients",
        "channels": ["email"],
        "required_data": ["clientName", "firmName"],
        "email": {
            "subject": "Bienvenue chez {{firmName}}",
            "body": "<p>Bonjour {{clientName}}, bienvenue chez {{firmName}}. "
            "Nous sommes ravis de vous compter parmi nos clients.</p>",
        },
    },
    "subscription_expiring": {
        "name": "Abonnement bientôt expiré",
        "description": "Notification d'expiration prochaine d'abonnement",
        "channels": ["email", "in_app"],
        "required_data": ["firmName", "expirationDate", "planName"],
        "email": {
            "subject": "Votre abonnement JURIS expire bientôt",
            "body": (
                "<p>Bonjour {{firmName}},</p>"
                "<p>Votre abonnement <strong>{{planName}}</strong> expire le "
                "<strong>{{expirationDate}}</strong>.</p>"
                "<p>{{message}}</p>"
                "<p>Renouvelez dès maintenant pour éviter toute interruption de service.</p>"
            ),
        },
    },
    "subscription_expired": {
        "name": "Abonnement expiré",
        "description": "Notification d'abonnement expiré",
        "channels": ["email", "in_app"],
        "required_data": ["firmName", "planName"],
        "email": {
            "subject": "Votre abonnement JURIS a expiré",
            "body": (
                "<p>Bonjour {{firmName}},</p>"
                "<p>Votre abonnement <strong>{{planName}}</strong> a expiré.</p>"
                "<p>Renouvelez-le pour retrouver l'accès à toutes vos données.</p>"
            ),
        },
    },
    "subscription_renewed": {
        "name": "Abonnement renouvelé",
        "description": "Confirmation de renouvellement d'abonnement",
        "channels": ["email", "in_app"],
        "required_data": ["planName", "expirationDate"],
        "email": {
            "subject": "Votre abonnement JURIS a été renouvelé",
            "body": (
                "<p>Votre abonnement <strong>{{planName}}</strong> a été renouvelé avec succès.</p>"
                "<p>Prochaine échéance : <strong>{{expirationDate}}</strong>.</p>"
            ),
        },
    },
    "invoice_sent": {
        "name": "Facture envoyée",
        "description": "Notification d'envoi de facture",
        "channels": ["email"],
        "required_data": ["clientName", "invoiceNumber", "amount", "firmName"],
        "email": {
            "subject": "Facture N° {{invoiceNumber}} - {{firmName}}",
            "body": "<p>Bonjour {{clientName}}, veuillez trouver votre facture N° {{invoiceNumber}} "
            "d'un montant de {{amount}}.</p>",
        },
    },
    "payment_received": {
        "name": "Paiement reçu",
        "description": "Confirmation de réception de paiement",
        "channels": ["email"],
        "required_data": ["clientName", "amount", "invoiceNumber", "firmName"],
        "email": {
            "subject": "Paiement reçu - Facture N° {{invoiceNumber}}",
            "body": "<p>Bonjour {{clientName}}, nous confirmons la réception de votre paiement de "
            "{{amount}} pour la facture N° {{invoiceNumber}}.</p>",
        },
    },
    "payment_overdue_critical": {
        "name": "Paiement en retard critique",
        "description": "Alerte de blocage imminent pour retard de paiement",
        "channels": ["email", "in_app"],
        "required_data": ["firmName", "amount", "daysOverdue"],
        "email": {
            "subject": "URGENT - Votre abonnement JURIS est en retard de paiement",
            "body": (
                "<p>Bonjour {{firmName}},</p>"
                "<p>Votre paiement de {{amount}} FCFA est en retard de {{daysOverdue}} jour(s).</p>"
                "<p>{{message}}</p>"
            ),
        },
    },
    "payment_successful": {
        "name": "Paiement confirmé",
        "description": "Confirmation de paiement d'abonnement",
        "channels": ["email", "in_app"],
        "required_data": ["firmName", "planName", "amount", "nextPaymentDate"],
        "email": {
            "subject": "Paiement confirmé - Abonnement {{planName}}",
            "body": (
                "<p>Bonjour {{firmName}},</p>"
                "<p>Nous confirmons la réception de votre paiement de {{amount}} FCFA pour "
                "l'abonnement <strong>{{planName}}</strong>.</p>"
                "<p>Prochain paiement : {{nextPaymentDate}}.</p>"
            ),
        },
    },
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def process_template(template: str, data: dict) -> str:
    """Replace every {{key}} with its value. Unknown placeholders are left untouched."""

    def replace(match):
        key = match.group(1)
        return str(data[key]) if key in data else match.group(0)

    return _PLACEHOLDER.sub(replace, template)


def get_template(notification_type: str) -> dict:
    if notification_type not in NOTIFICATION_TEMPLATES:
        raise ValueError(f"Unknown notification type: {notification_type}")
    return NOTIFICATION_TEMPLATES[notification_type]


def get_notification_title(notification_type: str) -> str:
    return NOTIFICATION_TITLES.get(notification_type, "Notification")


def list_templates() -> list[dict]:
    return [{"type": t, **template} for t, template in NOTIFICATION_TEMPLATES.items()]


def missing_required_data(notification_type: str, data: dict) -> list[str]:
    template = get_template(notification_type)
    return [key for key in template["required_data"] if key not in data]


def render_message(notification_type: str, data: dict) -> str:
    """Short text used for the in-app notification center"""
    if data.get("message"):
        return str(data["message"])
    template = get_template(notification_type)
    for channel in ("whatsapp", "sms"):
        if channel in template:
            return process_template(template[channel]["text"], data)
    if "email" in template:
        return process_template(template["email"]["subject"], data)
    return get_notification_title(notification_type)


def _json_safe(data: dict) -> dict:
    return {
        key: value if isinstance(value, (str, int, float, bool, type(None))) else str(value)
        for key, value in data.items()
    }


async def _deliver(
    db: Session,
    firm_id: str,
    notification: Notification,
    template: dict,
    channel: str,
    recipient: dict,
    data: dict,
    case_id: Optional[str],
) -> Optional[tuple[bool, Optional[str], Optional[str]]]:
    """Send one channel to one recipient. Returns None when the channel does not apply."""
    if channel == "email":
        if not recipient.get("email") or "email" not in template:
            return None
        subject = process_template(template["email"]["subject"], data)
        body = process_template(template["email"]["body"], data)
        mjml_content = notification_email_template(subject, body, data.get("firmName"))
        return await deliver_email(
            db, firm_id, recipient["email"], subject, mjml_content, case_id=case_id
        )

    if channel == "whatsapp":
        if not recipient.get("phone") or "whatsapp" not in template:
            return None
        text = process_template(template["whatsapp"]["text"], data)
        return await send_whatsapp_message(db, firm_id, recipient["phone"], text, case_id=case_id)

    if channel == "sms":
        if not recipient.get("phone") or "sms" not in template:
            return None
        text = process_template(template["sms"]["text"], data)
        return await send_sms(db, firm_id, recipient["phone"], text, case_id=case_id)

    if channel == "in_app":
        # The notification row itself is what the notification center displays
        return True, f"app_{notification.id}", None

    logger.warning(f"⚠️ Unknown notification channel: {channel}")
    return None


async def send_notification(
    db: Session,
    firm_id: str,
    notification_type: str,
    channels: list[str],
    recipients: list[dict],
    data: dict,
    case_id: Optional[str] = None,
    scheduled_at: Optional[datetime] = None,
) -> dict:
    """
    Send a templated notification to every recipient on every channel.

    Args:
        db: Database session
        firm_id: Firm the notification belongs to
        notification_type: Key of NOTIFICATION_TEMPLATES
        channels: Any of email, whatsapp, sms, in_app
        recipients: Dicts with optional "email" and "phone" and a "name"
        data: Values for the template placeholders

    Returns:
        Dict with overall success and per-delivery results
    """
    template = get_template(notification_type)

    missing = missing_required_data(notification_type, data)
    if missing:
        logger.warning(f"⚠️ {notification_type} notification missing data: {missing}")

    notification = Notification(
        firm_id=firm_id,
        case_id=case_id,
        type=notification_type,
        title=get_notification_title(notification_type),
        message=render_message(notification_type, data),
        channel=",".join(channels),
        recipient=",".join(r.get("email") or r.get("phone") or r.get("name", "") for r in recipients),
        status="pending",
        scheduled_at=scheduled_at,
        extra_data=_json_safe(data),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    results = []
    success = True

    for recipient in recipients:
        label = recipient.get("email") or recipient.get("phone") or recipient.get("name")
        for channel in channels:
            try:
                outcome = await _deliver(
                    db, firm_id, notification, template, channel, recipient, data, case_id
                )
            except Exception as e:
                logger.error(f"❌ Failed to send {notification_type} via {channel} to {label}: {e}")
                outcome = (False, None, str(e))

            if outcome is None:
                continue

            sent, message_id, error = outcome
            results.append(
                {
                    "channel": channel,
                    "recipient": label,
                    "success": sent,
                    "message_id": message_id,
                    "error": error,
                }
            )
            if sent:
                logger.info(f"✅ {notification_type} sent via {channel} to {label}")
            else:
                success = False
                logger.warning(f"⚠️ {notification_type} not sent via {channel} to {label}: {error}")

    notification.status = "sent" if success else "failed"
    notification.sent_at = datetime.utcnow()
    notification.extra_data = {**_json_safe(data), "results": results}
    db.commit()

    return {"success": success, "results": results, "notification_id": notification.id}


# ============================================
# Convenience senders for common notifications
# ============================================


async def send_appointment_reminder(
    db: Session,
    firm_id: str,
    client_email: Optional[str],
    client_phone: Optional[str],
    client_name: str,
    appointment_date: str,
    appointment_time: str,
    firm_name: str,
    case_id: Optional[str] = None,
) -> dict:
    return await send_notification(
        db,
        firm_id,
        "appointment_reminder",
        channels=["email", "whatsapp"],
        recipients=[{"email": client_email, "phone": client_phone, "name": client_name}],
        data={
            "clientName": client_name,
            "appointmentDate": appointment_date,
            "appointmentTime": appointment_time,
            "firmName": firm_name,
        },
        case_id=case_id,
    )


async def send_case_update(
    db: Session,
    firm_id: str,
    client_email: Optional[str],
    client_phone: Optional[str],
    client_name: str,
    case_title: str,
    update: str,
    firm_name: str,
    case_id: Optional[str] = None,
    channels: Optional[list[str]] = None,
) -> dict:
    return await send_notification(
        db,
        firm_id,
        "case_update",
        channels=channels or ["email", "whatsapp"],
        recipients=[{"email": client_email, "phone": client_phone, "name": client_name}],
        data={
            "clientName": client_name,
            "caseTitle": case_title,
            "update": update,
            "firmName": firm_name,
        },
        case_id=case_id,
    )


async def send_payment_reminder(
    db: Session,
    firm_id: str,
    client_email: Optional[str],
    client_phone: Optional[str],
    client_name: str,
    invoice_number: str,
    amount: str,
    due_date: str,
    firm_name: str,
) -> dict:
    return await send_notification(
        db,
        firm_id,
        "payment_reminder",
        channels=["email", "whatsapp"],
        recipients=[{"email": client_email, "phone": client_phone, "name": client_name}],
        data={
            "clientName": client_name,
            "invoiceNumber": invoice_number,
            "amount": amount,
            "dueDate": due_date,
            "firmName": firm_name,
        },
    )
