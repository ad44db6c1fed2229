"""
Error taxonomy shared by the store, services and HTTP layer.

Every error carries the HTTP status it maps to so the exception handlers in
``postshare.main`` can render it without a lookup table.
"""

from http import HTTPStatus


class PostshareError(Exception):
    """Base exception for all application errors."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(PostshareError):
    """Missing, invalid or expired token, or bad login credentials."""

    status_code = HTTPStatus.UNAUTHORIZED


class ForbiddenError(PostshareError):
    """Authenticated, but not the owner of the resource."""

    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(PostshareError):
    """Resource id does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class ConflictError(PostshareError):
    """Duplicate value for a unique field."""

    status_code = HTTPStatus.CONFLICT


class ValidationFailedError(PostshareError):
    """Malformed input shape."""

    status_code = HTTPStatus.BAD_REQUEST
