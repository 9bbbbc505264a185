"""
API view decorators for configuration checks and request parsing.
"""

import json
import logging
from functools import wraps

from common.errors import (
    DomainError,
    InternalError,
    InvalidInputError,
    UnsupportedMediaTypeError,
)
from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from uploads.storage import missing_settings

logger = logging.getLogger(__name__)


def _missing_database():
    database = settings.DATABASES.get("default", {})
    if not database.get("ENGINE") or not database.get("NAME"):
        return ["DATABASE_URL"]
    return []


DEPENDENCY_CHECKS = {
    "database": _missing_database,
    "object_store": missing_settings,
}


def requires_dependencies(*names):
    """
    Answer 500 naming every missing setting before the view runs.

    Usage::

        @requires_dependencies("database", "object_store")
        def upload_grant_view(request): ...
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            missing = []
            for name in names:
                missing.extend(DEPENDENCY_CHECKS[name]())
            if missing:
                logger.error("Missing configuration: %s", ", ".join(missing))
                return JsonResponse(
                    {"error": "Missing configuration", "missing": missing},
                    status=500,
                )
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def domain_errors(view_func):
    """Translate DomainError raised by the view into a JSON error response.

    A DatabaseError that escapes a service is logged and answered as an
    opaque InternalError.
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except DomainError as exc:
            if exc.status_code >= 500:
                logger.error("Request failed: %s %s: %s", request.method, request.path, exc)
            return JsonResponse(exc.as_dict(), status=exc.status_code)
        except DatabaseError:
            logger.exception("Store failure: %s %s", request.method, request.path)
            exc = InternalError()
            return JsonResponse(exc.as_dict(), status=exc.status_code)

    return wrapper


def parse_json_body(request):
    """
    Decode a JSON request body.

    Raises:
        UnsupportedMediaTypeError: If the Content-Type is not JSON.
        InvalidInputError: If the body is not valid JSON.
    """
    if request.content_type != "application/json":
        raise UnsupportedMediaTypeError()
    if not request.body:
        return {}
    try:
        return json.loads(request.body)
    except (UnicodeDecodeError, ValueError):
        raise InvalidInputError("body", "Invalid JSON") from None
