"""Shared utility functions used across all apps."""

import logging
import secrets
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

from django.utils import timezone

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def generate_reference(prefix, now=None):
    """
    Generate a reference number in the format PREFIX-YYYYMMDD-XXXXXX.

    Args:
        prefix: Short identifier (e.g., "PC")
        now: Optional aware datetime for the date part. Defaults to now.

    Returns:
        String like "PC-20260217-A1B2C3"
    """
    date_part = (now or timezone.now()).strftime("%Y%m%d")
    random_part = secrets.token_hex(3).upper()
    return f"{prefix}-{date_part}-{random_part}"


def apply_date_range(queryset, date_from=None, date_to=None, field="created_at"):
    """
    Apply optional date-range filters to a queryset.

    Usage::

        qs = Submission.objects.filter(status="submitted")
        qs = apply_date_range(qs, date_from, date_to)
    """
    if date_from:
        queryset = queryset.filter(**{f"{field}__date__gte": date_from})
    if date_to:
        queryset = queryset.filter(**{f"{field}__date__lte": date_to})
    return queryset


def to_epoch_ms(value):
    """Convert an aware datetime to integer milliseconds since the epoch."""
    if value is None:
        return None
    return (value - EPOCH) // timedelta(milliseconds=1)


@contextmanager
def safe_dispatch(operation_name, logger=None):
    """
    Context manager for operations that should never raise.

    Use around best-effort write-backs and other side-effects that must
    not break the main operation.

    Usage::

        with safe_dispatch("persist session expiry", logger):
            expire_session(session, now=now)
    """
    _logger = logger or logging.getLogger("photocontest.dispatch")
    try:
        yield
    except Exception as e:
        _logger.error("Failed to %s: %s", operation_name, e)
