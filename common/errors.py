"""Domain error taxonomy shared by services and the HTTP layer.

Services raise these; views map them to JSON responses using
``status_code``. Nothing here touches the database.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    NOT_FOUND = "NOT_FOUND"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class DomainError(Exception):
    """Base domain error with code, HTTP status and user-safe message."""

    code = ErrorCode.INTERNAL
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{self.code.value}: {self.message}"

    def as_dict(self):
        return {"error": self.message}


class InvalidInputError(DomainError):
    """Caller input is missing or malformed. Raised before any store access."""

    code = ErrorCode.INVALID_INPUT
    status_code = 400

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field

    def as_dict(self):
        return {"error": self.message, "field": self.field}


class UnsupportedMediaTypeError(InvalidInputError):
    """Request body is not JSON."""

    code = ErrorCode.UNSUPPORTED_MEDIA_TYPE
    status_code = 415

    def __init__(self, message="Unsupported Content-Type (use application/json)"):
        super().__init__("body", message)


class NotFoundError(DomainError):
    """Referenced session or draft does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class SessionExpiredError(DomainError):
    """Upload session passed its deadline."""

    code = ErrorCode.SESSION_EXPIRED
    status_code = 410

    def __init__(self, session_id):
        super().__init__("Upload session expired")
        self.session_id = session_id


class ConflictError(DomainError):
    """State precondition failed: session not open, draft mismatch, lost race."""

    code = ErrorCode.CONFLICT
    status_code = 409


class InternalError(DomainError):
    """Credential signing or store failure. The message shown is opaque."""

    code = ErrorCode.INTERNAL
    status_code = 500

    def __init__(self, message="Internal Server Error"):
        super().__init__(message)
