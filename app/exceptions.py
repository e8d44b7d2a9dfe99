"""Application errors mapped to HTTP status codes.

Handlers in ``main`` turn every ``AppError`` into a ``{"error": message}`` body
with the matching status code.
"""


class AppError(Exception):
    """Base class for errors that are safe to show to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    """Malformed or missing input, or failed validation."""

    status_code = 400


class UnauthorizedError(AppError):
    """No valid session, or wrong credentials."""

    status_code = 401


class ForbiddenError(AppError):
    """Authenticated but lacking the required role."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Uniqueness violation."""

    status_code = 409
