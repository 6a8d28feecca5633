"""Error models and exceptions.

Every failure the API reports to a client is a ``RosterError``. The exception
handler in ``guildroster.main`` renders it as::

    {"success": false, "error": {"code": ..., "message": ..., "user_message": ...}}
"""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    QUERY_FAILED = "QUERY_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Error body returned to clients."""

    code: ErrorCode
    message: str
    user_message: str


class RosterError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.API_ERROR
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if user_message is not None:
            self.user_message = user_message

    def to_error(self) -> AppError:
        return AppError(
            code=self.code,
            message=self.message,
            user_message=self.user_message,
        )


class NotFoundError(RosterError):
    """The requested record does not exist. Not a fault."""

    status_code = 404
    code = ErrorCode.NOT_FOUND
    user_message = "No matching record was found."


class QueryFailedError(RosterError):
    """The backing store could not answer a query."""

    status_code = 500
    code = ErrorCode.QUERY_FAILED
    user_message = "Failed to fetch data. Please try again later."


class UnauthorizedError(RosterError):
    """The API key is missing or unknown."""

    status_code = 401
    code = ErrorCode.UNAUTHORIZED
    user_message = "A valid API key is required."
