"""Typed engine failures.

Services raise these at the point of detection and let them propagate
unchanged; routers translate them with ``handle_engine_error``.
"""

from fastapi import HTTPException, status


class EngineError(Exception):
    """Base engine error."""

    def __init__(self, message: str, code: str = "engine_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(EngineError):
    """Referenced account, video, comment or report does not exist."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "not_found")


class ForbiddenError(EngineError):
    """Actor lacks the permission for this operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "forbidden")


class ConflictError(EngineError):
    """Duplicate of an existing unique fact."""

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, "conflict")


class InvalidArgumentError(EngineError):
    """Unrecognized or malformed input."""

    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message, "invalid_argument")


class InvalidOperationError(EngineError):
    """Business-rule violation independent of existence or permission."""

    def __init__(self, message: str = "Operation not allowed"):
        super().__init__(message, "invalid_operation")


class RateLimitExceededError(EngineError):
    """Per-account rate limit exceeded."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, "rate_limit_exceeded")


class ConcurrentUpdateError(EngineError):
    """Compare-and-set retries exhausted under contention."""

    def __init__(self, message: str = "Concurrent update, try again"):
        super().__init__(message, "concurrent_update")


STATUS_MAP: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_argument": status.HTTP_400_BAD_REQUEST,
    "invalid_operation": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "rate_limit_exceeded": status.HTTP_429_TOO_MANY_REQUESTS,
    "concurrent_update": status.HTTP_409_CONFLICT,
}


def handle_engine_error(error: EngineError) -> HTTPException:
    """Convert an engine error to an HTTP exception.

    Args:
        error: Engine error raised by a service

    Returns:
        HTTPException with the mapped status code
    """
    status_code = STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=error.message)
