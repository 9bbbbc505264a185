"""Draft registration: presigned upload grants recorded per session slot."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from common.errors import InternalError, InvalidInputError
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from uploads.models import DraftImage
from uploads.services.sessions import ensure_session_open, load_session
from uploads.storage import build_draft_key, get_object_store

logger = logging.getLogger(__name__)

MAX_SLOTS = 5
ALLOWED_ROTATIONS = frozenset(DraftImage.Rotation.values)


@dataclass(frozen=True)
class UploadGrant:
    """Presigned PUT credential plus the draft row it was recorded as."""

    url: str
    method: str
    headers: dict
    key: str
    expires_in: int
    expires_at: datetime
    draft: DraftImage


def validate_grant_request(slot, filename, content_type=None, size_bytes=None, rotation=None):
    """Validate upload grant arguments without touching the store.

    Returns:
        The trimmed filename.

    Raises:
        InvalidInputError: Naming the first offending argument.
    """
    filename = (filename or "").strip()
    if not filename:
        raise InvalidInputError("filename", "Missing filename")
    if len(filename) > 255:
        raise InvalidInputError("filename", "Filename too long (max 255 characters)")

    if isinstance(slot, bool) or not isinstance(slot, int) or not 0 <= slot < MAX_SLOTS:
        raise InvalidInputError(
            "slot", f"Invalid slot (must be integer 0..{MAX_SLOTS - 1})"
        )

    if size_bytes is not None:
        if size_bytes < 0:
            raise InvalidInputError("size_bytes", "Invalid size_bytes (must be integer >= 0)")
        max_size = settings.PHOTO_UPLOAD_MAX_SIZE
        if size_bytes > max_size:
            raise InvalidInputError(
                "size_bytes",
                f"File size {size_bytes} bytes exceeds maximum of {max_size} bytes.",
            )

    if rotation is not None and rotation not in ALLOWED_ROTATIONS:
        raise InvalidInputError("rotation", "Invalid rotation (must be 0, 90, 180 or 270)")

    allowed_types = settings.PHOTO_UPLOAD_ALLOWED_TYPES
    if content_type and allowed_types is not None and content_type not in allowed_types:
        raise InvalidInputError(
            "content_type",
            f"File type '{content_type}' is not allowed. "
            f"Allowed types: {', '.join(allowed_types)}",
        )
    return filename


def issue_upload_grant(
    session_id,
    slot,
    filename,
    content_type=None,
    size_bytes=None,
    rotation=None,
    now=None,
    store=None,
):
    """Mint a presigned PUT for one slot and record it as a draft image.

    A repeat call for the same (session, slot) overwrites the previous
    draft's key and file details; the previously referenced object is
    left in the bucket.

    Args:
        session_id: Id of an open upload session.
        slot: Sort position 0..4.
        filename: Original client filename.
        content_type: Optional MIME type, bound into the signature.
        size_bytes: Optional declared size in bytes.
        rotation: Optional rotation hint (0, 90, 180, 270).
        now: Optional aware datetime for the deadline check.
        store: Optional ObjectStoreGateway. Defaults to the configured one.

    Returns:
        An UploadGrant.

    Raises:
        InvalidInputError: On bad slot, rotation, size or filename.
        NotFoundError: If the session does not exist.
        ConflictError: If the session is not open.
        SessionExpiredError: If the session is past its deadline.
        InternalError: If signing or the draft upsert fails.
    """
    filename = validate_grant_request(slot, filename, content_type, size_bytes, rotation)
    content_type = content_type or ""
    now = now or timezone.now()

    session = load_session(session_id)
    ensure_session_open(session, now)

    key = build_draft_key(session.pk, filename)
    expires_in = settings.UPLOAD_GRANT_EXPIRES_IN
    store = store or get_object_store()
    signed = store.presign_put(key, expires_in, content_type=content_type or None)

    try:
        with transaction.atomic():
            draft, created = DraftImage.objects.update_or_create(
                session=session,
                slot=slot,
                defaults={
                    "object_key": key,
                    "original_filename": filename,
                    "content_type": content_type,
                    "size_bytes": size_bytes,
                    "rotation": rotation,
                    "status": DraftImage.Status.DRAFT,
                    "created_at": now,
                },
            )
    except DatabaseError as exc:
        logger.exception(
            "Failed to record draft image: session=%s slot=%d", session.pk, slot
        )
        raise InternalError("Failed to record upload") from exc

    logger.info(
        "Upload grant issued: session=%s slot=%d draft=%s key=%s %s",
        session.pk,
        slot,
        draft.pk,
        key,
        "created" if created else "replaced",
    )
    return UploadGrant(
        url=signed["url"],
        method=signed["method"],
        headers=signed["headers"],
        key=key,
        expires_in=expires_in,
        expires_at=now + timedelta(seconds=expires_in),
        draft=draft,
    )
