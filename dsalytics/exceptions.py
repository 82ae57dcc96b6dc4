"""
Domain errors raised by the service layer

Each error carries the HTTP status and error code the API renders it with.
"""


class DomainError(Exception):
    """Base class for failures reported to the caller"""

    status_code = 500
    error_code = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    """Referenced plan, user plan, topic or problem does not exist"""

    status_code = 404
    error_code = "not_found"


class InvalidInput(DomainError):
    """Malformed value such as an unknown status"""

    status_code = 400
    error_code = "invalid_input"


class InvalidTransition(DomainError):
    """Status change not allowed from the current state"""

    status_code = 409
    error_code = "invalid_transition"


class Unauthenticated(DomainError):
    status_code = 401
    error_code = "unauthenticated"


class StorageFailure(DomainError):
    """Backing store unavailable or failed mid-operation"""

    status_code = 503
    error_code = "storage_failure"
