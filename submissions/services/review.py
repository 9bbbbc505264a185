"""Review status transitions for committed submissions."""

import logging

from django.utils import timezone

from submissions.models import Submission

logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = (Submission.Status.APPROVED, Submission.Status.REJECTED)


def transition_review_status(queryset, status, now=None):
    """Move submitted entries in ``queryset`` to a review outcome.

    Only rows still in ``submitted`` are touched, so an entry that was
    already reviewed keeps its first outcome.

    Returns:
        Number of submissions transitioned.

    Raises:
        ValueError: If ``status`` is not approved or rejected.
    """
    if status not in REVIEW_OUTCOMES:
        raise ValueError(f"Invalid review status: {status}")

    now = now or timezone.now()
    updated = queryset.filter(status=Submission.Status.SUBMITTED).update(
        status=status,
        updated_at=now,
    )
    logger.info("Review status changed: status=%s count=%d", status, updated)
    return updated
