"""Domain exceptions raised by the service layer.

The API layer translates these into HTTP responses in ``main.py``; services
never raise ``HTTPException`` directly.
"""

from __future__ import annotations


class QuoteStageError(RuntimeError):
    """Base exception for every failure surfaced to callers."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.public_message
        super().__init__(self.message)


class ValidationError(QuoteStageError):
    """Malformed input: length, enum membership or numeric range."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class UnauthorizedError(QuoteStageError):
    """No verified identity, or the identity does not match the request."""

    status_code = 401
    public_message = "Unauthorized"


class ForbiddenError(QuoteStageError):
    """Abuse signal was positive or the identity class may not act."""

    status_code = 403
    public_message = "Access denied"


class NotFoundError(QuoteStageError):
    """Referenced quote does not exist."""

    status_code = 404
    public_message = "Quote not found"


class RateLimitedError(QuoteStageError):
    """Admission window exhausted.

    Attributes:
        retry_after: Whole seconds until the caller may try again.
    """

    status_code = 429
    public_message = "Too many requests. Please slow down."

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class ConflictError(QuoteStageError):
    """Transactional write conflict outlived its retry budget."""

    status_code = 409
    public_message = "Concurrent update conflict, please retry"


class InternalError(QuoteStageError):
    """Unexpected store failure. The message is never shown to callers."""

    status_code = 500
