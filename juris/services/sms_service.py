"""
Twilio SMS Service
Sends SMS notifications through the Twilio REST API
"""

import logging
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from .. import config
from ..shared.validators import format_phone_number
from .communication_log import log_outbound, mark_delivery

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


async def send_sms(
    db: Optional[Session],
    firm_id: Optional[str],
    to_phone: str,
    message_body: str,
    from_phone: Optional[str] = None,
    case_id: Optional[str] = None,
    client_id: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> tuple[bool, Optional[str], Optional[str]]:
    """
    Send SMS via Twilio

    Args:
        db: Database session used to log the communication (optional)
        firm_id: Sending firm
        to_phone: Recipient phone number, normalized to international format
        message_body: SMS message content
        from_phone: Override the configured sender number
        http_client: Injected client (tests)

    Returns:
        Tuple of (success, message_sid, error_message)
    """
    formatted_phone = format_phone_number(to_phone)
    if not formatted_phone:
        logger.warning(f"⚠️ Invalid phone number for SMS: {to_phone}")
        return False, None, "Invalid phone number format"

    communication = log_outbound(
        db,
        firm_id,
        channel="sms",
        to_address=formatted_phone,
        content=message_body,
        subject="SMS Message",
        case_id=case_id,
        client_id=client_id,
    )

    success, message_sid, error = await _post_to_twilio(
        formatted_phone, message_body, from_phone, http_client
    )
    mark_delivery(db, communication, success, message_sid, error)
    return success, message_sid, error


async def _post_to_twilio(
    to_phone: str,
    message_body: str,
    from_phone: Optional[str],
    http_client: Optional[httpx.AsyncClient],
) -> tuple[bool, Optional[str], Optional[str]]:
    if not config.TWILIO_ACCOUNT_SID or not config.TWILIO_AUTH_TOKEN or not config.TWILIO_PHONE_NUMBER:
        logger.error("❌ Twilio credentials not configured")
        return False, None, "SMS credentials not configured"

    sender = from_phone or config.TWILIO_PHONE_NUMBER
    if sender == to_phone:
        return False, None, "Cannot send SMS to the same number as sender"

    data = {"From": sender, "To": to_phone, "Body": message_body}

    try:
        logger.info(f"📱 Sending SMS to Twilio API for {to_phone}")
        client = http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{config.TWILIO_ACCOUNT_SID}/Messages.json",
                auth=(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN),
                data=data,
                timeout=10.0,
            )
        finally:
            if http_client is None:
                await client.aclose()

        try:
            payload = response.json()
        except ValueError:
            return False, None, f"SMS API Error: {response.status_code} - {response.text}"

        if response.status_code in (200, 201) and payload.get("sid"):
            logger.info(f"✅ SMS sent successfully: SID={payload['sid']}")
            return True, payload["sid"], None

        error_message = payload.get("message") or f"SMS API Error: {response.status_code}"
        logger.error(f"❌ Twilio API error: {response.status_code} - {error_message}")
        return False, None, error_message

    except httpx.HTTPError as e:
        logger.error(f"❌ Error sending SMS: {str(e)}")
        return False, None, str(e)
