"""Error taxonomy shared by services and routers.

Services raise these; a single exception handler in ``threadboard.main``
turns them into a terse ``{"error": {"code", "message"}}`` body.
"""

from fastapi import status


class BoardError(Exception):
    """Base class for user-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    message: str = "Request failed"

    def __init__(self, code: str | None = None, message: str | None = None):
        if code is not None:
            self.code = code
        if message is not None:
            self.message = message
        super().__init__(self.code)


class Unauthenticated(BoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    message = "Authentication required"


class Forbidden(BoardError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "Not permitted"


class RateLimited(Forbidden):
    code = "too_fast"
    message = "Posting too fast"


class ThreadLocked(Forbidden):
    code = "too_old"
    message = "Thread is locked"


class NotFound(Forbidden):
    code = "not_found"
    message = "Quoted post not found"


class ContentTooShort(Forbidden):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "content_short"
    message = "Content too short"


class Gone(BoardError):
    status_code = status.HTTP_410_GONE
    code = "gone"
    message = "Target is gone"


class ValidationFailed(BoardError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_failed"
    message = "Invalid input"


class Conflict(BoardError):
    status_code = status.HTTP_409_CONFLICT
    code = "data_conflict"
    message = "Data conflict"


class PersistenceFailure(BoardError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "db_execute_failed"
    message = "Database execution failed"
