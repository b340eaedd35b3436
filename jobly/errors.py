"""
Error types raised by the Jobly core and data-access layer.

Each error carries the HTTP status the API layer reports it with; the core
itself never deals with transport concerns.
"""


class JoblyError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(JoblyError):
    """Malformed or contradictory caller-supplied data."""

    status_code = 400


class Unauthorized(JoblyError):
    """Access decision denied."""

    status_code = 401


class NotFound(JoblyError):
    """Requested record does not exist."""

    status_code = 404
