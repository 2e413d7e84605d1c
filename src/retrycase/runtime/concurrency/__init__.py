"""Cooperative cancellation primitives.

Key Components:
    - CancelToken: Thread-safe cancellation signal with optional deadline
    - CancelReason: Why a token fired

Example:
    >>> from retrycase.runtime.concurrency import CancelToken
    >>> token = CancelToken().with_timeout(30.0)
    >>> token.wait(1.0)  # False unless cancelled within the second
    False
"""

from __future__ import annotations

from .cancel import CancelCallback, CancelReason, CancelToken

__all__ = [
    "CancelCallback",
    "CancelReason",
    "CancelToken",
]
