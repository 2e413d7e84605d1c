"""Unified error handling for retrycase.

- ErrorCode: Standard error codes
- RetrycaseError: Base exception
- OperationCancelled/DeadlineExceeded: Why a cancellation token fired
"""

from .errors import DeadlineExceeded, ErrorCode, OperationCancelled, RetrycaseError

__all__ = [
    "ErrorCode",
    "RetrycaseError",
    "OperationCancelled",
    "DeadlineExceeded",
]
