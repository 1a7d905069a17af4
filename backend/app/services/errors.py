"""Error kinds raised by the feedback services.

The API layer maps each kind to an HTTP status through ``status_code``;
services never catch them except to roll back a unit of work.
"""
from __future__ import annotations


class FeedbackError(Exception):
    """Base class for every error the feedback services surface."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(FeedbackError):
    """Malformed input, detected before any store access."""

    status_code = 400
    public_message = "Invalid feedback input"


class AuthorizationError(FeedbackError):
    status_code = 403
    public_message = "Not allowed to access this feedback"


class NotFoundError(FeedbackError):
    status_code = 404
    public_message = "Feedback not found"


class PersistenceError(FeedbackError):
    """A store-level failure; the unit of work has been rolled back."""

    status_code = 500
    public_message = "Feedback could not be saved"


class InternalError(FeedbackError):
    status_code = 500
