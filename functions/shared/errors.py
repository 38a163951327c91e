"""
Error taxonomy shared by the HTTP API and the reading core.

Each error carries the HTTP status it maps to and a message that is safe to
show to the user.
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(AppError):
    """Acting user is not allowed to touch the resource."""

    status_code = 403
    default_message = "You are not allowed to do that"


class NotAuthenticatedError(AuthorizationError):
    status_code = 401
    default_message = "You must be signed in"


class InvalidInputError(AppError):
    """Rejected before any call to an external service."""

    status_code = 400
    default_message = "Invalid input"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ServiceError(AppError):
    """A hosted service call failed; the user may retry."""

    status_code = 500
    default_message = "Something went wrong. Please try again."
