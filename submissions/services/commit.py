"""Submission commit: promote a session's drafts into a permanent submission."""

import logging
from dataclasses import dataclass

from common.errors import ConflictError, DomainError, InternalError, InvalidInputError
from common.utils import generate_reference
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from uploads.models import DraftImage, UploadSession
from uploads.services.sessions import ensure_session_open, load_session

from submissions.forms import MAX_PHOTOS, validate_submission
from submissions.models import Photo, PhotoVariant, Submission

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "PC"
PHOTO_META_FIELDS = ("title", "caption", "shoot_date", "shoot_location")


@dataclass(frozen=True)
class CommitResult:
    """A committed submission and its photos in slot order."""

    submission: Submission
    photos: list


def select_drafts(session, data):
    """Pick the drafts to commit and pair each with its photo metadata.

    Without explicit draft references every draft of the session is
    committed and overrides are matched by slot. With references exactly
    the referenced drafts are committed.

    Returns:
        List of (DraftImage, meta dict) tuples ordered by slot.

    Raises:
        InvalidInputError: If the session has no drafts or more than five.
        ConflictError: If a referenced draft is foreign to the session or
            no longer a draft.
    """
    drafts = list(session.drafts.order_by("slot"))
    if not drafts:
        raise InvalidInputError("photos", "No photos found. Please upload photos first.")
    if len(drafts) > MAX_PHOTOS:
        raise InvalidInputError("photos", f"Too many photos (max {MAX_PHOTOS})")

    if not data.references_drafts:
        by_slot = {meta["sort_order"]: meta for meta in data.photos}
        return [(draft, by_slot.get(draft.slot, {})) for draft in drafts]

    by_id = {draft.pk: draft for draft in drafts}
    selected = []
    for meta in data.photos:
        draft = by_id.get(meta["draft_id"])
        if draft is None:
            raise ConflictError(f"Draft {meta['draft_id']} does not belong to this session")
        if draft.status != DraftImage.Status.DRAFT:
            raise ConflictError(f"Draft {draft.pk} is no longer a draft")
        if meta["sort_order"] is not None and meta["sort_order"] != draft.slot:
            raise ConflictError(f"Draft {draft.pk} is in slot {draft.slot}, not {meta['sort_order']}")
        selected.append((draft, meta))
    return sorted(selected, key=lambda pair: pair[0].slot)


def _photo_meta(meta):
    return {
        name: meta.get(name) or ("" if name != "shoot_date" else None)
        for name in PHOTO_META_FIELDS
    }


def _write_commit(session, selected, fields, now):
    """Write the submission, photos, variants and state changes as one unit.

    Statement order: submission, photos, variants, draft finalization,
    then the guarded ``open → committed`` session transition. Any raise
    inside the block rolls every row back.
    """
    with transaction.atomic():
        submission = Submission.objects.create(
            session=session,
            reference=generate_reference(REFERENCE_PREFIX, now),
            status=Submission.Status.SUBMITTED,
            created_at=now,
            **fields,
        )

        photos = [
            Photo(
                submission=submission,
                draft=draft,
                original_filename=draft.original_filename,
                sort_order=draft.slot,
                status=Photo.Status.ACTIVE,
                created_at=now,
                **_photo_meta(meta),
            )
            for draft, meta in selected
        ]
        Photo.objects.bulk_create(photos)

        PhotoVariant.objects.bulk_create(
            [
                PhotoVariant(
                    photo=photo,
                    kind=PhotoVariant.Kind.ORIGINAL,
                    object_key=draft.object_key,
                    content_type=draft.content_type,
                    size_bytes=draft.size_bytes,
                    is_ready=True,
                    generated_at=now,
                    created_at=now,
                )
                for photo, (draft, _meta) in zip(photos, selected, strict=True)
            ]
        )

        draft_ids = [draft.pk for draft, _meta in selected]
        finalized = DraftImage.objects.filter(
            pk__in=draft_ids,
            status=DraftImage.Status.DRAFT,
        ).update(status=DraftImage.Status.FINAL, updated_at=now)
        if finalized != len(draft_ids):
            raise ConflictError("Draft images changed during commit")

        committed = UploadSession.objects.filter(
            pk=session.pk,
            state=UploadSession.State.OPEN,
        ).update(state=UploadSession.State.COMMITTED, updated_at=now)
        if committed == 0:
            raise ConflictError("Session state conflict: already committed")

    return submission, photos


def commit_submission(payload, now=None):
    """Validate a session and its drafts, then commit them atomically.

    Validation, session and draft checks run first and never write
    (except the lazy expiry of a stale session). The mutating phase is
    attempted once; a lost race on the final session transition is
    reported as a conflict even though the store raised nothing.

    Args:
        payload: Decoded JSON commit request.
        now: Optional aware datetime for expiry checks and timestamps.

    Returns:
        A CommitResult.

    Raises:
        InvalidInputError: On bad fields, or zero / too many drafts.
        NotFoundError: If the session does not exist.
        SessionExpiredError: If the session is past its deadline.
        ConflictError: If the session is not open, a referenced draft
            mismatches, or another commit won the race.
        InternalError: If the store fails during the write.
    """
    now = now or timezone.now()
    data = validate_submission(payload, now=now)

    session = load_session(data.session_id)
    ensure_session_open(session, now)
    selected = select_drafts(session, data)

    try:
        submission, photos = _write_commit(session, selected, data.fields, now)
    except DomainError as exc:
        logger.warning("Submission commit rejected: session=%s error=%s", session.pk, exc)
        raise
    except IntegrityError as exc:
        logger.warning("Submission commit hit a constraint: session=%s error=%s", session.pk, exc)
        raise ConflictError("Submission conflicts with existing data") from exc
    except DatabaseError as exc:
        logger.exception("Submission commit failed: session=%s", session.pk)
        raise InternalError() from exc

    logger.info(
        "Submission committed: pk=%s reference=%s session=%s photos=%d",
        submission.pk,
        submission.reference,
        session.pk,
        len(photos),
    )
    return CommitResult(submission=submission, photos=photos)
