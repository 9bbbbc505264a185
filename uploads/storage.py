"""Object store gateway for presigned direct uploads (S3-compatible / R2)."""

import logging
import re
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from common.errors import InternalError
from django.conf import settings

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = (
    "R2_ACCOUNT_ID",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "R2_BUCKET_NAME",
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def safe_filename(name):
    """Replace every character outside ``[A-Za-z0-9.-]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def build_draft_key(session_id, filename):
    """Build a collision-resistant object key scoped under the session.

    Returns:
        String like "draft_photos/<session>/<hex>_photo.jpg"
    """
    token = uuid.uuid4().hex
    return f"draft_photos/{session_id}/{token}_{safe_filename(filename)}"


def missing_settings():
    """Return the names of object store settings that are not configured."""
    return [name for name in REQUIRED_SETTINGS if not getattr(settings, name, "")]


class ObjectStoreGateway:
    """Mints presigned PUT credentials. Never reads, lists or deletes objects."""

    def __init__(self, *, bucket, access_key, secret_key, endpoint, client=None):
        if client is None:
            session = boto3.session.Session()
            client = session.client(
                "s3",
                endpoint_url=endpoint,
                region_name="auto",
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                config=Config(signature_version="s3v4"),
            )
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls):
        endpoint = settings.R2_ENDPOINT_URL or (
            f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"
        )
        return cls(
            bucket=settings.R2_BUCKET_NAME,
            access_key=settings.R2_ACCESS_KEY_ID,
            secret_key=settings.R2_SECRET_ACCESS_KEY,
            endpoint=endpoint,
        )

    def presign_put(self, key, expires_in, content_type=None):
        """Generate a presigned PUT URL for ``key``.

        When ``content_type`` is given it is part of the signature, so the
        client must send the returned ``Content-Type`` header verbatim.

        Args:
            key: Object key to upload to.
            expires_in: Credential lifetime in seconds.
            content_type: Optional MIME type to bind into the signature.

        Returns:
            dict: {"url": str, "method": "PUT", "headers": dict, "expires_in": int}

        Raises:
            InternalError: If the credential cannot be signed.
        """
        params = {"Bucket": self.bucket, "Key": key}
        headers = {}
        if content_type:
            params["ContentType"] = content_type
            headers["Content-Type"] = content_type

        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params=params,
                ExpiresIn=expires_in,
                HttpMethod="PUT",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Failed to presign upload: bucket=%s key=%s", self.bucket, key)
            raise InternalError("Failed to sign upload URL") from exc

        return {
            "url": url,
            "method": "PUT",
            "headers": headers,
            "expires_in": expires_in,
        }


def get_object_store():
    """Build the configured gateway."""
    return ObjectStoreGateway.from_settings()
