"""JSON views for upload sessions, upload grants, submissions and admin listing."""

import logging

from common.errors import InvalidInputError
from common.utils import to_epoch_ms
from django.conf import settings
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from submissions.services.commit import commit_submission
from submissions.services.listing import list_submissions
from uploads.services.grants import issue_upload_grant
from uploads.services.sessions import create_upload_session, get_upload_session

from api.decorators import domain_errors, parse_json_body, requires_dependencies
from api.forms import SubmissionListForm, UploadGrantForm

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
@requires_dependencies("database")
@domain_errors
def session_create_view(request):
    """Open an upload session. Body: ``{email?, ttl_ms?}``."""
    body = parse_json_body(request)
    if not isinstance(body, dict):
        raise InvalidInputError("body", "Expected a JSON object.")
    session = create_upload_session(email=body.get("email"), ttl_ms=body.get("ttl_ms"))
    return JsonResponse(
        {
            "session_id": str(session.pk),
            "state": session.state,
            "expires_at_ms": to_epoch_ms(session.expires_at),
            "created_at_ms": to_epoch_ms(session.created_at),
        },
        status=201,
    )


@require_http_methods(["GET"])
@requires_dependencies("database")
@domain_errors
def session_detail_view(request, session_id):
    """Return a session, reporting a stale open session as expired."""
    session = get_upload_session(session_id)
    return JsonResponse(
        {
            "id": str(session.pk),
            "email": session.email or None,
            "state": session.state,
            "expires_at_ms": to_epoch_ms(session.expires_at),
            "created_at_ms": to_epoch_ms(session.created_at),
            "updated_at_ms": to_epoch_ms(session.updated_at),
        }
    )


@require_http_methods(["GET"])
@requires_dependencies("database", "object_store")
@domain_errors
def upload_grant_view(request):
    """Mint a presigned PUT for one slot and record the draft."""
    params = UploadGrantForm(data=request.GET).cleaned_or_raise()
    grant = issue_upload_grant(
        session_id=params["session_id"],
        slot=params["slot"],
        filename=params["filename"],
        content_type=params["content_type"] or None,
        size_bytes=params["size_bytes"],
        rotation=params["rotation"],
    )
    return JsonResponse(
        {
            "url": grant.url,
            "key": grant.key,
            "method": grant.method,
            "headers": grant.headers,
            "expires_in": grant.expires_in,
            "expires_at_ms": to_epoch_ms(grant.expires_at),
            "draft_id": str(grant.draft.pk),
        }
    )


@csrf_exempt
@require_http_methods(["POST"])
@requires_dependencies("database")
@domain_errors
def submission_create_view(request):
    """Commit a session's drafts as a submission."""
    result = commit_submission(parse_json_body(request))
    submission = result.submission
    return JsonResponse(
        {
            "submission_id": str(submission.pk),
            "reference": submission.reference,
            "status": submission.status,
            "created_at_ms": to_epoch_ms(submission.created_at),
            "photos": [
                {
                    "photo_id": str(photo.pk),
                    "slot": photo.sort_order,
                    "draft_id": str(photo.draft_id),
                    "original_filename": photo.original_filename,
                }
                for photo in result.photos
            ],
        },
        status=201,
    )


def _serialize_photo(photo):
    variants = list(photo.variants.all())
    return {
        "photo_id": str(photo.pk),
        "slot": photo.sort_order,
        "original_filename": photo.original_filename,
        "title": photo.title,
        "caption": photo.caption,
        "shoot_date": photo.shoot_date.isoformat() if photo.shoot_date else None,
        "shoot_location": photo.shoot_location,
        "object_key": variants[0].object_key if variants else None,
    }


def _serialize_submission(submission):
    return {
        "id": str(submission.pk),
        "reference": submission.reference,
        "status": submission.status,
        "work_title": submission.work_title,
        "pen_name": submission.pen_name,
        "full_name": submission.full_name,
        "email": submission.email,
        "prefecture": submission.prefecture,
        "created_at_ms": to_epoch_ms(submission.created_at),
        "photos": [_serialize_photo(photo) for photo in submission.photos.all()],
    }


@require_http_methods(["GET"])
@requires_dependencies("database")
@domain_errors
def admin_submission_list_view(request):
    """Paginated submission listing for reviewers. Requires ``X-Admin-Key``."""
    expected = settings.ADMIN_API_KEY
    provided = request.headers.get("X-Admin-Key", "")
    if not expected or not constant_time_compare(provided, expected):
        logger.warning("Admin listing rejected: remote=%s", request.META.get("REMOTE_ADDR"))
        return JsonResponse({"error": "Unauthorized"}, status=401)

    params = SubmissionListForm(data=request.GET).cleaned_or_raise()
    page = list_submissions(
        page=params["page"] or 1,
        limit=params["limit"],
        status=params["status"] or None,
        date_from=params["date_from"],
        date_to=params["date_to"],
    )
    return JsonResponse(
        {
            "submissions": [_serialize_submission(s) for s in page.submissions],
            "pagination": {
                "total": page.total,
                "page": page.page,
                "limit": page.limit,
                "total_pages": page.total_pages,
            },
        }
    )
