"""Error taxonomy shared by the tracker, ledger and scheduler services.

Each error carries the HTTP status it is rendered with, so routers never
translate exceptions by hand.
"""

from __future__ import annotations


class TrackerError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(TrackerError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(TrackerError):
    status_code = 403
    default_message = "Forbidden"


class ValidationFailedError(TrackerError):
    status_code = 400
    default_message = "Invalid input"


class ConflictError(TrackerError):
    status_code = 400
    default_message = "Conflicting state"


class NotFoundError(TrackerError):
    status_code = 404
    default_message = "Not found"


class NoActiveSessionError(NotFoundError):
    # reported as a bad request, the caller asked to stop something that is not running
    status_code = 400
    default_message = "No active tracking session found"
