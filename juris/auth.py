import base64
import json
import logging
import time
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()

# Allowed clock skew for exp / iat checks
CLOCK_SKEW_SECONDS = 60


def _b64url_decode(segment: str) -> bytes:
    padding = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding if padding != 4 else ""))


def _hs256_signature(secret: str, message: bytes) -> crypto_hmac.HMAC:
    h = crypto_hmac.HMAC(secret.encode("utf-8"), hashes.SHA256())
    h.update(message)
    return h


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token.
    Checks the HS256 signature, the audience and the exp / iat claims.
    """
    if not config.SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    parts = token.split(".")
    if len(parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(parts)} parts")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64url_decode(header_b64))
        signature = _b64url_decode(signature_b64)
        decoded_payload = json.loads(_b64url_decode(payload_b64))
        if not isinstance(header, dict) or not isinstance(decoded_payload, dict):
            raise ValueError("token header and payload must be JSON objects")
        for claim in ("exp", "iat"):
            value = decoded_payload.get(claim, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{claim} claim must be a number")
    except (ValueError, TypeError) as e:
        logger.error(f"❌ Failed to decode token: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if header.get("alg") != "HS256":
        logger.error(f"❌ Invalid token algorithm: {header.get('alg')}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")

    try:
        _hs256_signature(config.SUPABASE_JWT_SECRET, f"{header_b64}.{payload_b64}".encode()).verify(
            signature
        )
    except InvalidSignature as e:
        logger.error("❌ Token signature verification failed")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    aud = decoded_payload.get("aud")
    audiences = aud if isinstance(aud, list) else [aud]
    if config.SUPABASE_JWT_AUDIENCE not in audiences:
        logger.error("❌ Token audience mismatch")
        raise HTTPException(status_code=401, detail="Invalid token audience")

    now = time.time()
    exp = decoded_payload.get("exp", 0)
    if exp + CLOCK_SKEW_SECONDS < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )

    iat = decoded_payload.get("iat", 0)
    if iat > now + CLOCK_SKEW_SECONDS:
        logger.warning("⚠️ Token issued in the future")
        raise HTTPException(status_code=401, detail="Invalid token")

    if not decoded_payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return decoded_payload


async def get_current_firm(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Resolve the firm profile for the bearer token, creating it on first login"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    claims = verify_supabase_token(credentials.credentials)
    firm_id = claims["sub"]
    email: Optional[str] = claims.get("email")

    profile = db.query(Profile).filter(Profile.id == firm_id).first()
    if profile:
        return profile

    metadata = claims.get("user_metadata") or {}
    firm_name = metadata.get("firm_name") or email or "Mon cabinet"

    logger.info(f"🆕 Creating profile for firm: {firm_name}")
    profile = Profile(id=firm_id, firm_name=firm_name, email=email)
    db.add(profile)
    try:
        db.commit()
        db.refresh(profile)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create profile for {firm_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create firm profile") from e

    logger.info(f"✅ New profile created: {profile.id}")
    return profile
