"""Creator program error taxonomy.

Every service failure maps to one of these classes. Routers never build
HTTPExceptions for domain failures; the handlers registered in main render
them as ``{"success": false, "message": ..., "code": ...}``.
"""


class CreatorProgramError(Exception):
    """Base exception for creator program operations."""

    status_code = 400
    default_code = "error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(CreatorProgramError):
    """Malformed or missing input. Never retried."""

    status_code = 400
    default_code = "validation_error"


class Unauthorized(CreatorProgramError):
    """Missing or invalid caller identity."""

    status_code = 401
    default_code = "unauthorized"


class Forbidden(CreatorProgramError):
    """Caller lacks the required role or ownership."""

    status_code = 403
    default_code = "forbidden"


class NotFound(CreatorProgramError):
    """Referenced record does not exist."""

    status_code = 404
    default_code = "not_found"


class Conflict(CreatorProgramError):
    """State-machine rule violation."""

    status_code = 409
    default_code = "conflict"


class RateLimited(CreatorProgramError):
    """Operation attempted before its cooldown elapsed."""

    status_code = 429
    default_code = "rate_limited"

    def __init__(self, message: str, retry_after_seconds: int, code: str | None = None):
        super().__init__(message, code)
        self.retry_after_seconds = retry_after_seconds


class DependencyFailure(CreatorProgramError):
    """Persistence or delivery layer failure."""

    status_code = 503
    default_code = "dependency_failure"

    def __init__(self, message: str, retryable: bool = True, code: str | None = None):
        super().__init__(message, code)
        self.retryable = retryable
