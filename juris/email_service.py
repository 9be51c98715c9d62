"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html
from sqlalchemy.orm import Session

from . import config
from .email_templates import subscription_payment_reminder_template
from .services.communication_log import log_outbound, mark_delivery
from .shared.formatting import format_amount

logger = logging.getLogger(__name__)

resend.api_key = config.RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        Exception: when email is disabled, not configured or the send fails
    """
    if not config.EMAIL_ENABLED:
        raise Exception("Email service is disabled")

    if not config.RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        resend.api_key = config.RESEND_API_KEY
        response = resend.Emails.send(
            {
                "from": from_address or config.EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def deliver_email(
    db: Optional[Session],
    firm_id: Optional[str],
    to: str,
    subject: str,
    mjml_content: str,
    case_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> tuple[bool, Optional[str], Optional[str]]:
    """
    Send an email and record it in the communications log.

    Returns:
        Tuple of (success, message_id, error_message)
    """
    communication = log_outbound(
        db,
        firm_id,
        channel="email",
        to_address=to,
        content=subject,
        subject=subject,
        from_address=config.EMAIL_FROM_ADDRESS,
        case_id=case_id,
        client_id=client_id,
    )
    try:
        response = await send_email(to=to, subject=subject, mjml_content=mjml_content)
    except Exception as e:
        mark_delivery(db, communication, False, error=str(e))
        return False, None, str(e)

    message_id = response.get("id") if isinstance(response, dict) else None
    mark_delivery(db, communication, True, message_id)
    return True, message_id, None


# ============================================
# Subscription emails
# ============================================


async def send_subscription_payment_reminder(
    db: Optional[Session],
    firm_id: str,
    to: str,
    firm_name: str,
    reference: str,
    amount: float,
    days_overdue: int,
) -> tuple[bool, Optional[str], Optional[str]]:
    """Send the monthly subscription payment reminder to a firm"""
    formatted_amount = format_amount(amount)
    mjml_content = subscription_payment_reminder_template(
        firm_name, reference, formatted_amount, days_overdue
    )
    return await deliver_email(
        db,
        firm_id,
        to=to,
        subject=f"Rappel de paiement - Facture #{reference}",
        mjml_content=mjml_content,
    )
