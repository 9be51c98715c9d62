"""
WhatsApp Business messaging
Text and template messages through the configured WhatsApp HTTP API
"""

import logging
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from .. import config
from ..shared.formatting import format_amount
from ..shared.validators import format_phone_number
from .communication_log import log_outbound, mark_delivery

logger = logging.getLogger(__name__)


def build_text_payload(to_phone: str, message: str) -> dict:
    return {
        "messaging_product": "whatsapp",
        "to": to_phone.replace("+", ""),
        "type": "text",
        "text": {"body": message},
    }


def build_template_payload(to_phone: str, template_name: str, params: list[str]) -> dict:
    components = []
    if params:
        components.append(
            {"type": "body", "parameters": [{"type": "text", "text": p} for p in params]}
        )
    return {
        "messaging_product": "whatsapp",
        "to": to_phone.replace("+", ""),
        "type": "template",
        "template": {"name": template_name, "language": {"code": "fr"}, "components": components},
    }


async def send_whatsapp_message(
    db: Optional[Session],
    firm_id: Optional[str],
    to_phone: str,
    message: str,
    template_name: Optional[str] = None,
    template_params: Optional[list[str]] = None,
    case_id: Optional[str] = None,
    client_id: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> tuple[bool, Optional[str], Optional[str]]:
    """
    Send a WhatsApp message.

    Returns:
        Tuple of (success, message_id, error_message)
    """
    if not config.WHATSAPP_ENABLED:
        logger.debug("WhatsApp service is disabled")
        return False, None, "WhatsApp service is disabled"

    if not config.WHATSAPP_API_KEY or not config.WHATSAPP_INSTANCE_ID:
        logger.error("❌ WhatsApp API credentials not configured")
        return False, None, "WhatsApp API credentials not configured"

    formatted_phone = format_phone_number(to_phone)
    if not formatted_phone:
        logger.warning(f"⚠️ Invalid phone number for WhatsApp: {to_phone}")
        return False, None, "Invalid phone number format"

    if template_name:
        payload = build_template_payload(formatted_phone, template_name, template_params or [])
    else:
        payload = build_text_payload(formatted_phone, message)

    communication = log_outbound(
        db,
        firm_id,
        channel="whatsapp",
        to_address=formatted_phone,
        content=message,
        case_id=case_id,
        client_id=client_id,
    )

    try:
        logger.info(f"📱 Sending WhatsApp message to {formatted_phone}")
        client = http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                config.WHATSAPP_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {config.WHATSAPP_API_KEY}"},
                timeout=30.0,
            )
        finally:
            if http_client is None:
                await client.aclose()

        if response.status_code in (200, 201):
            data = response.json() if response.content else {}
            message_id = data.get("id") or data.get("messageId")
            if not message_id and data.get("messages"):
                message_id = data["messages"][0].get("id")
            logger.info(f"✅ WhatsApp message sent to {formatted_phone}")
            mark_delivery(db, communication, True, message_id)
            return True, message_id, None

        error = f"API Error: {response.status_code} - {response.text[:200]}"
        logger.error(f"❌ WhatsApp API error for {formatted_phone}: {error}")
        mark_delivery(db, communication, False, error=error)
        return False, None, error

    except httpx.HTTPError as e:
        error = f"Network error: Unable to reach WhatsApp API ({e})"
        logger.error(f"❌ {error}")
        mark_delivery(db, communication, False, error=error)
        return False, None, error


async def send_payment_reminder(
    db: Optional[Session],
    firm_id: Optional[str],
    to_phone: str,
    recipient_name: str,
    amount: float,
    reference: str,
) -> tuple[bool, Optional[str], Optional[str]]:
    message = (
        "💰 *Rappel de paiement*\n\n"
        f"Bonjour {recipient_name},\n\n"
        f"Nous vous rappelons que le paiement de la facture #{reference} "
        f"d'un montant de {format_amount(amount)} FCFA est en attente.\n\n"
        "Merci de régulariser votre situation."
    )
    return await send_whatsapp_message(db, firm_id, to_phone, message)
