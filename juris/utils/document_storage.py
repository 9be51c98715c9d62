"""
Document storage utilities.
Handles R2 object keys and presigned upload / download URLs for case documents.
"""

import hashlib
import logging
from datetime import datetime
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .. import config

logger = logging.getLogger(__name__)

MAX_DOCUMENT_SIZE_BYTES = 25 * 1024 * 1024  # 25MB
UPLOAD_URL_EXPIRATION_SECONDS = 900
DOWNLOAD_URL_EXPIRATION_SECONDS = 3600


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=config.R2_ACCESS_KEY_ID,
        aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def generate_document_key(firm_id: str, document_id: str, filename: str, version: int = 1) -> str:
    """
    Generate a unique R2 key for a document version.

    Format: documents/{firm_id}/{document_id}/v{version}_{hash}_{filename}
    """
    timestamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    file_hash = hashlib.md5(f"{document_id}{version}{timestamp}".encode()).hexdigest()[:8]
    safe_filename = "".join(c for c in filename if c.isalnum() or c in "._-")[:100]
    return f"documents/{firm_id}/{document_id}/v{version}_{file_hash}_{safe_filename}"


def generate_upload_url(key: str, content_type: Optional[str] = None) -> Optional[str]:
    """Presigned PUT URL the browser uploads the file to"""
    params = {"Bucket": config.R2_BUCKET_NAME, "Key": key}
    if content_type:
        params["ContentType"] = content_type
    try:
        return get_r2_client().generate_presigned_url(
            "put_object", Params=params, ExpiresIn=UPLOAD_URL_EXPIRATION_SECONDS
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Error generating upload URL for {key}: {e}")
        return None


def generate_download_url(key: str, filename: Optional[str] = None) -> Optional[str]:
    """Presigned GET URL for private document access"""
    params = {"Bucket": config.R2_BUCKET_NAME, "Key": key}
    if filename:
        params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'
    try:
        return get_r2_client().generate_presigned_url(
            "get_object", Params=params, ExpiresIn=DOWNLOAD_URL_EXPIRATION_SECONDS
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Error generating download URL for {key}: {e}")
        return None


def delete_document_object(key: str) -> bool:
    try:
        get_r2_client().delete_object(Bucket=config.R2_BUCKET_NAME, Key=key)
        return True
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Error deleting {key} from R2: {e}")
        return False
