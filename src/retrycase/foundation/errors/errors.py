"""Error codes and exceptions for retry sequences.

The core Retrier never raises; it reports exhaustion and cancellation through
its boolean result. These types surface at the edges: a cancellation token
describing why it fired, and the retry driver refusing to start on a token
that is already done.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Standard error codes for retry failures."""
    CANCELLED = "CANCELLED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNKNOWN = "UNKNOWN"


class RetrycaseError(Exception):
    """Base exception for retrycase.

    Attributes:
        message: Human-readable description
        code: Machine-readable ErrorCode
    """

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class OperationCancelled(RetrycaseError):
    """Raised when work is abandoned because its cancellation token fired."""

    code = ErrorCode.CANCELLED

    def __init__(self, message: str = "operation cancelled", *, code: ErrorCode | None = None) -> None:
        super().__init__(message, code=code)


class DeadlineExceeded(OperationCancelled):
    """Raised when a token's deadline passed before the work finished."""

    code = ErrorCode.DEADLINE_EXCEEDED

    def __init__(self, message: str = "deadline exceeded", *, code: ErrorCode | None = None) -> None:
        super().__init__(message, code=code)
