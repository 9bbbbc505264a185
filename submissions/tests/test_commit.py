"""Unit tests for the submission commit service."""

import re
import uuid
from datetime import UTC, datetime, timedelta
from unittest import mock

import pytest
from common.errors import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    SessionExpiredError,
)
from django.db import DatabaseError
from uploads.models import DraftImage, UploadSession

from submissions.forms import validate_submission
from submissions.models import Photo, PhotoVariant, Submission
from submissions.services.commit import _write_commit, commit_submission, select_drafts


def _assert_nothing_committed(session):
    assert Submission.objects.count() == 0
    assert Photo.objects.count() == 0
    assert PhotoVariant.objects.count() == 0
    session.refresh_from_db()
    assert session.state == UploadSession.State.OPEN
    assert not session.drafts.exclude(status=DraftImage.Status.DRAFT).exists()


@pytest.mark.django_db
class TestCommitSubmission:
    """Tests for commit_submission service."""

    def test_commits_all_drafts_in_slot_order(
        self, open_session, three_drafts, submission_payload
    ):
        result = commit_submission(submission_payload)

        submission = result.submission
        assert submission.status == Submission.Status.SUBMITTED
        assert submission.session_id == open_session.pk
        assert re.fullmatch(r"PC-\d{8}-[0-9A-F]{6}", submission.reference)
        assert submission.prefecture == "東京都"
        assert [photo.sort_order for photo in result.photos] == [0, 1, 2]
        assert [photo.draft_id for photo in result.photos] == [d.pk for d in three_drafts]

        assert Submission.objects.count() == 1
        assert Photo.objects.filter(submission=submission).count() == 3
        assert PhotoVariant.objects.filter(photo__submission=submission).count() == 3

        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.COMMITTED
        assert set(open_session.drafts.values_list("status", flat=True)) == {"final"}

    def test_variant_copies_draft_verbatim(
        self, open_session, make_draft, submission_payload
    ):
        draft = make_draft(open_session, 0, content_type="image/png", size_bytes=4096)
        result = commit_submission(submission_payload)

        variant = result.photos[0].variants.get()
        assert variant.kind == PhotoVariant.Kind.ORIGINAL
        assert variant.object_key == draft.object_key
        assert variant.content_type == "image/png"
        assert variant.size_bytes == 4096
        assert variant.is_ready is True
        assert variant.width_px is None
        assert variant.generated_at is not None

    def test_timestamps_use_injected_clock(
        self, open_session, three_drafts, submission_payload
    ):
        now = open_session.created_at + timedelta(minutes=30)
        result = commit_submission(submission_payload, now=now)
        assert result.submission.created_at == now
        assert result.submission.reference.startswith(f"PC-{now:%Y%m%d}-")

    def test_overrides_matched_by_slot(
        self, open_session, three_drafts, submission_payload
    ):
        submission_payload["photos"] = [
            {"sort_order": 1, "title": "Dusk", "shoot_location": "Kamakura"},
            {"sort_order": 4, "title": "No such slot"},
        ]
        result = commit_submission(submission_payload)

        titles = [photo.title for photo in result.photos]
        assert titles == ["", "Dusk", ""]
        assert result.photos[1].shoot_location == "Kamakura"
        assert result.photos[0].shoot_date is None

    def test_second_commit_conflicts(self, open_session, three_drafts, submission_payload):
        commit_submission(submission_payload)
        with pytest.raises(ConflictError, match="state: committed"):
            commit_submission(submission_payload)
        assert Submission.objects.count() == 1

    def test_terms_not_agreed_writes_nothing(
        self, open_session, three_drafts, submission_payload
    ):
        submission_payload["agreed_terms"] = 0
        with pytest.raises(InvalidInputError) as exc_info:
            commit_submission(submission_payload)
        assert exc_info.value.field == "agreed_terms"
        _assert_nothing_committed(open_session)

    def test_no_drafts(self, open_session, submission_payload):
        with pytest.raises(InvalidInputError, match="No photos found"):
            commit_submission(submission_payload)
        _assert_nothing_committed(open_session)

    def test_five_drafts_allowed(self, open_session, make_draft, submission_payload):
        for slot in range(5):
            make_draft(open_session, slot)
        result = commit_submission(submission_payload)
        assert [photo.sort_order for photo in result.photos] == [0, 1, 2, 3, 4]

    def test_unknown_session(self, db, submission_payload):
        submission_payload["session_id"] = str(uuid.uuid4())
        with pytest.raises(NotFoundError):
            commit_submission(submission_payload)

    def test_expired_session(self, open_session, three_drafts, submission_payload):
        later = open_session.expires_at + timedelta(seconds=1)
        with pytest.raises(SessionExpiredError):
            commit_submission(submission_payload, now=later)

        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.EXPIRED
        assert Submission.objects.count() == 0

    def test_validation_uses_injected_clock(
        self, open_session, three_drafts, submission_payload
    ):
        """A birth date after the injected day is rejected even if already past."""
        submission_payload["birth_date"] = "2000-01-02"
        with pytest.raises(InvalidInputError) as exc_info:
            commit_submission(submission_payload, now=datetime(2000, 1, 1, 12, tzinfo=UTC))
        assert exc_info.value.field == "birth_date"
        _assert_nothing_committed(open_session)

    def test_commit_at_deadline_succeeds(
        self, open_session, three_drafts, submission_payload
    ):
        commit_submission(submission_payload, now=open_session.expires_at)
        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.COMMITTED


@pytest.mark.django_db
class TestCommitWithDraftReferences:
    """Tests for the explicit draft reference path."""

    def test_commits_only_referenced_drafts(
        self, open_session, three_drafts, submission_payload
    ):
        first, second, third = three_drafts
        submission_payload["photos"] = [
            {"draft_id": str(third.pk), "title": "Three"},
            {"draft_id": str(first.pk), "title": "One"},
        ]
        result = commit_submission(submission_payload)

        assert [photo.sort_order for photo in result.photos] == [0, 2]
        assert [photo.title for photo in result.photos] == ["One", "Three"]
        second.refresh_from_db()
        assert second.status == DraftImage.Status.DRAFT

    def test_foreign_draft_conflicts(
        self, open_session, three_drafts, make_draft, submission_payload
    ):
        other_session = UploadSession.objects.create(
            expires_at=open_session.expires_at
        )
        foreign = make_draft(other_session, 0)
        submission_payload["photos"] = [{"draft_id": str(foreign.pk)}]

        with pytest.raises(ConflictError, match=str(foreign.pk)):
            commit_submission(submission_payload)
        _assert_nothing_committed(open_session)

    def test_finalized_draft_conflicts(
        self, open_session, three_drafts, submission_payload
    ):
        DraftImage.objects.filter(pk=three_drafts[1].pk).update(
            status=DraftImage.Status.FINAL
        )
        submission_payload["photos"] = [{"draft_id": str(three_drafts[1].pk)}]
        with pytest.raises(ConflictError, match="no longer a draft"):
            commit_submission(submission_payload)

    def test_slot_mismatch_conflicts(
        self, open_session, three_drafts, submission_payload
    ):
        submission_payload["photos"] = [
            {"draft_id": str(three_drafts[0].pk), "sort_order": 2}
        ]
        with pytest.raises(ConflictError, match="slot 0"):
            commit_submission(submission_payload)


@pytest.mark.django_db
class TestCommitAtomicity:
    """Tests for the all-or-nothing write phase."""

    def test_lost_race_on_session_transition(
        self, open_session, three_drafts, submission_payload
    ):
        """A zero-row session update rolls back every earlier insert."""
        data = validate_submission(submission_payload)
        selected = select_drafts(open_session, data)
        UploadSession.objects.filter(pk=open_session.pk).update(
            state=UploadSession.State.COMMITTED
        )

        with pytest.raises(ConflictError, match="already committed"):
            _write_commit(open_session, selected, data.fields, open_session.created_at)

        assert Submission.objects.count() == 0
        assert Photo.objects.count() == 0
        assert PhotoVariant.objects.count() == 0
        assert not DraftImage.objects.filter(status=DraftImage.Status.FINAL).exists()

    def test_existing_submission_for_session_conflicts(
        self, open_session, three_drafts, submission_payload, make_submission
    ):
        """A unique violation on the session link is reported as a conflict."""
        rival = make_submission()
        Submission.objects.filter(pk=rival.pk).update(session=open_session)

        with pytest.raises(ConflictError, match="conflicts with existing data"):
            commit_submission(submission_payload)
        assert Submission.objects.count() == 1
        assert Photo.objects.count() == 0
        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.OPEN

    def test_store_failure_is_internal_error(
        self, open_session, three_drafts, submission_payload
    ):
        with mock.patch.object(
            PhotoVariant.objects,
            "bulk_create",
            side_effect=DatabaseError("disk I/O error"),
        ):
            with pytest.raises(InternalError):
                commit_submission(submission_payload)
        _assert_nothing_committed(open_session)
