"""Shared fixtures for submissions app tests."""

import pytest


@pytest.fixture
def three_drafts(open_session, make_draft):
    """Drafts in slots 0, 1 and 2 of ``open_session``."""
    return [make_draft(open_session, slot) for slot in (0, 1, 2)]


@pytest.fixture
def make_submission(db):
    """Factory fixture to create Submission rows on fresh sessions."""
    from common.utils import generate_reference
    from uploads.services.sessions import create_upload_session

    from submissions.models import Submission

    def _make(status=Submission.Status.SUBMITTED, created_at=None, work_title="Harbor"):
        session = create_upload_session()
        kwargs = {"created_at": created_at} if created_at else {}
        return Submission.objects.create(
            session=session,
            reference=generate_reference("PC"),
            work_title=work_title,
            episode="An episode.",
            last_name="山田",
            first_name="花子",
            last_name_kana="やまだ",
            first_name_kana="はなこ",
            gender=Submission.Gender.FEMALE,
            birth_date="1988-08-08",
            email="hanako@example.com",
            phone="03-1234-5678",
            postal_code="1000001",
            prefecture="東京都",
            address_line1="千代田区千代田1-1",
            agreed_terms=1,
            status=status,
            **kwargs,
        )

    return _make
