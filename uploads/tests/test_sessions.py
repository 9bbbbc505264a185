"""Unit tests for upload session services."""

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

from uploads.models import UploadSession
from uploads.services.sessions import (
    create_upload_session,
    ensure_session_open,
    expire_session,
    get_upload_session,
    load_session,
    parse_ttl_ms,
)

NOW = datetime(2026, 4, 1, 9, 0, 0, 250000, tzinfo=UTC)


class TestParseTtlMs:
    """Tests for parse_ttl_ms."""

    def test_default_is_24_hours(self):
        assert parse_ttl_ms(None) == 86_400_000

    @pytest.mark.parametrize("raw", [300_000, 604_800_000, "600000", 900000.0])
    def test_accepts_bounds_and_integral_values(self, raw):
        assert parse_ttl_ms(raw) == int(raw)

    @pytest.mark.parametrize("raw", [299_999, 604_800_001, "abc", 1.5, True, [1]])
    def test_rejects(self, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_ttl_ms(raw)
        assert exc_info.value.field == "ttl_ms"
        assert "300000..604800000" in exc_info.value.message


@pytest.mark.django_db
class TestCreateUploadSession:
    """Tests for create_upload_session service."""

    def test_default_ttl(self):
        session = create_upload_session(now=NOW)
        assert session.state == UploadSession.State.OPEN
        assert session.created_at == NOW
        assert session.expires_at - session.created_at == timedelta(hours=24)

    def test_custom_ttl_and_email(self):
        session = create_upload_session(email=" hanako@example.jp ", ttl_ms=300_000, now=NOW)
        assert session.email == "hanako@example.jp"
        assert session.expires_at == NOW + timedelta(minutes=5)

    def test_invalid_email(self):
        with pytest.raises(InvalidInputError) as exc_info:
            create_upload_session(email="not-an-email")
        assert exc_info.value.field == "email"
        assert UploadSession.objects.count() == 0

    def test_store_failure(self):
        with mock.patch.object(
            UploadSession.objects, "create", side_effect=DatabaseError("disk I/O error")
        ):
            with pytest.raises(InternalError, match="Failed to create upload session"):
                create_upload_session(now=NOW)


@pytest.mark.django_db
class TestLoadSession:
    """Tests for load_session."""

    def test_unknown_id(self):
        with pytest.raises(NotFoundError):
            load_session("6f1d3a2e-0000-4000-8000-000000000000")

    def test_malformed_id(self):
        with pytest.raises(NotFoundError):
            load_session("not-a-uuid")


@pytest.mark.django_db
class TestGetUploadSession:
    """Tests for get_upload_session read-time correction."""

    def test_open_session_unchanged(self, open_session):
        session = get_upload_session(open_session.pk)
        assert session.state == UploadSession.State.OPEN

    def test_stale_session_reported_and_persisted_expired(self, open_session):
        later = open_session.expires_at + timedelta(seconds=1)
        session = get_upload_session(str(open_session.pk), now=later)
        assert session.state == UploadSession.State.EXPIRED

        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.EXPIRED

    def test_failed_write_back_still_reports_expired(self, open_session):
        later = open_session.expires_at + timedelta(seconds=1)
        with mock.patch(
            "uploads.services.sessions.expire_session",
            side_effect=DatabaseError("database is locked"),
        ):
            session = get_upload_session(open_session.pk, now=later)
        assert session.state == UploadSession.State.EXPIRED

        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.OPEN


@pytest.mark.django_db
class TestExpireSession:
    """Tests for the guarded open → expired transition."""

    def test_expires_stale_open_session(self, open_session):
        later = open_session.expires_at + timedelta(seconds=1)
        assert expire_session(open_session, now=later) is True
        assert open_session.state == UploadSession.State.EXPIRED

    def test_not_before_deadline(self, open_session):
        assert expire_session(open_session, now=open_session.expires_at) is False
        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.OPEN

    def test_committed_session_untouched(self, open_session):
        UploadSession.objects.filter(pk=open_session.pk).update(
            state=UploadSession.State.COMMITTED
        )
        later = open_session.expires_at + timedelta(seconds=1)
        assert expire_session(open_session, now=later) is False
        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.COMMITTED


@pytest.mark.django_db
class TestEnsureSessionOpen:
    """Tests for ensure_session_open."""

    def test_open_session_passes(self, open_session):
        ensure_session_open(open_session, open_session.created_at)

    def test_stale_session_expires_and_raises(self, open_session):
        later = open_session.expires_at + timedelta(seconds=1)
        with pytest.raises(SessionExpiredError):
            ensure_session_open(open_session, later)
        open_session.refresh_from_db()
        assert open_session.state == UploadSession.State.EXPIRED

    def test_committed_session_conflicts(self, open_session):
        open_session.state = UploadSession.State.COMMITTED
        with pytest.raises(ConflictError, match="state: committed"):
            ensure_session_open(open_session, open_session.created_at)
