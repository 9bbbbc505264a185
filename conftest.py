"""Shared pytest fixtures for the photo contest service."""

import pytest

TEST_R2_SETTINGS = {
    "R2_ACCOUNT_ID": "testaccount",
    "R2_ACCESS_KEY_ID": "test-access-key",
    "R2_SECRET_ACCESS_KEY": "test-secret-key",
    "R2_BUCKET_NAME": "contest-photos",
    "R2_ENDPOINT_URL": "",
}


@pytest.fixture
def r2_settings(settings):
    """Configure dummy object store credentials (presigning is offline)."""
    for name, value in TEST_R2_SETTINGS.items():
        setattr(settings, name, value)
    return settings


@pytest.fixture
def object_store(r2_settings):
    """A real boto3-backed gateway using the dummy credentials."""
    from uploads.storage import ObjectStoreGateway

    return ObjectStoreGateway.from_settings()


@pytest.fixture
def open_session(db):
    """Create an open upload session with the default lifetime."""
    from uploads.services.sessions import create_upload_session

    return create_upload_session(email="taro@example.com")


@pytest.fixture
def make_draft(db):
    """Factory fixture to create DraftImage rows directly."""
    from uploads.models import DraftImage

    def _make(session, slot, filename=None, content_type="image/jpeg", size_bytes=1024):
        filename = filename or f"photo{slot}.jpg"
        return DraftImage.objects.create(
            session=session,
            slot=slot,
            object_key=f"draft_photos/{session.pk}/{slot:032x}_{filename}",
            original_filename=filename,
            content_type=content_type,
            size_bytes=size_bytes,
        )

    return _make


@pytest.fixture
def submission_payload(open_session):
    """A valid commit payload for ``open_session``."""
    return {
        "session_id": str(open_session.pk),
        "work_title": "Morning Harbor",
        "episode": "Taken at dawn while the fishing boats came back in.",
        "pen_name": "",
        "last_name": "山田",
        "first_name": "太郎",
        "last_name_kana": "やまだ",
        "first_name_kana": "たろう",
        "gender": "male",
        "birth_date": "1990-04-01",
        "agreed_terms": 1,
        "contacts": {
            "email": "taro@example.com",
            "phone": "090-1234-5678",
            "postal_code": "123-4567",
            "prefecture": "東京都",
            "address_line1": "千代田区千代田1-1",
        },
    }
