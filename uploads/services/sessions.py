"""Upload session services: creation, lookup and lazy expiry."""

import logging
import uuid
from datetime import timedelta

from common.errors import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    SessionExpiredError,
)
from common.utils import safe_dispatch
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import DatabaseError
from django.utils import timezone

from uploads.models import UploadSession

logger = logging.getLogger(__name__)


def parse_ttl_ms(raw):
    """Validate a requested session lifetime in milliseconds.

    Args:
        raw: None, an int, an integral float, or a decimal string.

    Returns:
        The TTL in milliseconds (the configured default when ``raw`` is None).

    Raises:
        InvalidInputError: If the value is not an integer within the
            configured bounds.
    """
    if raw is None:
        return settings.UPLOAD_SESSION_DEFAULT_TTL_MS

    low = settings.UPLOAD_SESSION_MIN_TTL_MS
    high = settings.UPLOAD_SESSION_MAX_TTL_MS
    message = f"Invalid ttl_ms (must be integer {low}..{high})"

    if isinstance(raw, bool):
        raise InvalidInputError("ttl_ms", message)
    if isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidInputError("ttl_ms", message)
        raw = int(raw)
    if isinstance(raw, str):
        try:
            raw = int(raw.strip())
        except ValueError:
            raise InvalidInputError("ttl_ms", message) from None
    if not isinstance(raw, int) or not low <= raw <= high:
        raise InvalidInputError("ttl_ms", message)
    return raw


def normalize_email(raw):
    """Return a trimmed email or "" when absent.

    Raises:
        InvalidInputError: If the email does not have a local@domain.tld shape.
    """
    if raw is None:
        return ""
    email = str(raw).strip()
    if not email:
        return ""
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidInputError("email", "Invalid email") from None
    return email


def create_upload_session(email=None, ttl_ms=None, now=None):
    """Open a new upload session.

    Args:
        email: Optional contact email.
        ttl_ms: Optional lifetime in milliseconds. Defaults to
            ``settings.UPLOAD_SESSION_DEFAULT_TTL_MS`` (24 hours).
        now: Optional aware datetime used as the creation instant.

    Returns:
        An UploadSession instance in state OPEN.

    Raises:
        InvalidInputError: On a malformed email or out-of-range TTL.
        InternalError: If the insert fails.
    """
    email = normalize_email(email)
    ttl_ms = parse_ttl_ms(ttl_ms)
    now = now or timezone.now()

    try:
        session = UploadSession.objects.create(
            email=email,
            state=UploadSession.State.OPEN,
            expires_at=now + timedelta(milliseconds=ttl_ms),
            created_at=now,
        )
    except DatabaseError as exc:
        logger.exception("Failed to create upload session: ttl_ms=%d", ttl_ms)
        raise InternalError("Failed to create upload session") from exc

    logger.info(
        "Upload session created: pk=%s ttl_ms=%d expires_at=%s",
        session.pk,
        ttl_ms,
        session.expires_at.isoformat(),
    )
    return session


def load_session(session_id):
    """Fetch a session by id.

    Raises:
        NotFoundError: If the id is malformed or unknown.
    """
    try:
        pk = uuid.UUID(str(session_id).strip())
    except ValueError:
        raise NotFoundError("Session not found") from None

    session = UploadSession.objects.filter(pk=pk).first()
    if session is None:
        raise NotFoundError("Session not found")
    return session


def expire_session(session, now=None):
    """Transition a stale open session to EXPIRED.

    Uses an atomic UPDATE guarded by ``state='open'`` and the deadline, so
    a session that was committed in the meantime is left untouched.

    Args:
        session: An UploadSession instance.
        now: Optional aware datetime for the deadline comparison.

    Returns:
        True if this call performed the transition.
    """
    now = now or timezone.now()
    updated = UploadSession.objects.filter(
        pk=session.pk,
        state=UploadSession.State.OPEN,
        expires_at__lt=now,
    ).update(state=UploadSession.State.EXPIRED, updated_at=now)

    if updated:
        session.state = UploadSession.State.EXPIRED
        session.updated_at = now
        logger.info("Upload session expired: pk=%s", session.pk)
    return bool(updated)


def get_upload_session(session_id, now=None):
    """Return a session with its state corrected for the deadline.

    A session stored as open but past ``expires_at`` is reported as
    expired. Persisting that transition is best-effort: a failed
    write-back is logged and the corrected view is still returned.

    Raises:
        NotFoundError: If the session does not exist.
    """
    now = now or timezone.now()
    session = load_session(session_id)

    if session.effective_state(now) != session.state:
        with safe_dispatch("persist session expiry", logger):
            expire_session(session, now=now)
        session.state = UploadSession.State.EXPIRED
    return session


def ensure_session_open(session, now):
    """Enforce that a session accepts uploads or a commit at ``now``.

    A stale open session is expired on the spot before rejecting.

    Raises:
        SessionExpiredError: If the session is past its deadline.
        ConflictError: If the session is committed or expired.
    """
    if session.state == UploadSession.State.OPEN and session.is_past_deadline(now):
        expire_session(session, now=now)
        raise SessionExpiredError(session.pk)
    if session.state != UploadSession.State.OPEN:
        raise ConflictError(f"Session not open (state: {session.state})")
