"""
Webhook Security Module

Signature verification for payment provider callbacks:
- Constant-time signature comparison
- Optional timestamp validation against replays
"""

import hashlib
import hmac
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time"""
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_timestamp(timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS) -> bool:
    """
    Verify webhook timestamp is within acceptable range.

    Args:
        timestamp: Unix timestamp as string
        max_age: Maximum age in seconds

    Returns:
        True if timestamp is valid or absent, False otherwise
    """
    if not timestamp:
        return True

    try:
        age = abs(int(time.time()) - int(timestamp))
    except (ValueError, TypeError):
        logger.warning(f"🚫 Invalid webhook timestamp format: {timestamp}")
        return False

    if age > max_age:
        logger.warning(f"🚫 Webhook timestamp too old: {age}s (max: {max_age}s)")
        return False
    return True


async def verify_payment_callback(request: Request, secret: Optional[str]) -> bytes:
    """
    Verify the X-Signature header of a payment callback.

    The signature is the hex HMAC-SHA256 of the raw body, or of
    "{X-Timestamp}.{body}" when the provider sends a timestamp, so a captured
    callback cannot be replayed under a fresh timestamp. Verification is skipped
    when no secret is configured.

    Returns:
        The raw request body
    """
    raw_body = await request.body()

    if not secret:
        logger.debug("Payment callback secret not configured, skipping signature check")
        return raw_body

    signature = request.headers.get("X-Signature", "")
    if not signature:
        logger.error("❌ Missing X-Signature header on payment callback")
        raise HTTPException(status_code=401, detail="Missing webhook signature")

    timestamp = request.headers.get("X-Timestamp")
    if not verify_timestamp(timestamp):
        raise HTTPException(status_code=401, detail="Webhook timestamp expired")

    signed_payload = f"{timestamp}.".encode("utf-8") + raw_body if timestamp else raw_body
    expected = compute_hmac_sha256(secret, signed_payload)
    if not constant_time_compare(expected, signature):
        logger.error("❌ Payment callback signature mismatch")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    logger.info("✅ Payment callback signature verified")
    return raw_body
