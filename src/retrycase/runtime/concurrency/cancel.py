"""Cancellation tokens with optional deadlines.

A CancelToken is an externally owned signal shared between a retry
sequence and whatever else may want to abandon it. Any thread may cancel
it; waiters blocked in wait() or wait_async() wake immediately.

Tokens form a tree: children derived with with_cancel(), with_timeout() or
with_deadline() fire when their parent fires, but cancelling or expiring a
child never touches the parent. Deadlines are evaluated lazily against the
monotonic clock, so no timer threads are involved.

Example:
    >>> root = CancelToken()
    >>> with root.with_timeout(5.0) as token:
    ...     if token.wait(0.1):
    ...         raise token.error()
    >>> root.cancel()  # Wakes every waiter on root and its children
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from enum import StrEnum
from typing import TYPE_CHECKING, Callable

from retrycase.foundation.errors import DeadlineExceeded, OperationCancelled

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("retrycase.concurrency")

CancelCallback = Callable[["CancelToken"], None]


class CancelReason(StrEnum):
    """Why a token fired."""
    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class CancelToken:
    """Thread-safe cancellation signal with an optional monotonic deadline.

    Attributes:
        deadline: Monotonic timestamp after which the token fires (None = never)
        reason: CancelReason once fired, None before
    """

    __slots__ = ("_event", "_lock", "_reason", "_deadline", "_callbacks", "_parent")

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: CancelReason | None = None
        self._deadline = deadline
        self._callbacks: list[CancelCallback] = []
        self._parent: CancelToken | None = None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def reason(self) -> CancelReason | None:
        return self._reason if self.cancelled else None

    @property
    def cancelled(self) -> bool:
        """Whether the token has fired, expiring it if the deadline has passed."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(CancelReason.DEADLINE_EXCEEDED)
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds until the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def error(self) -> OperationCancelled | None:
        """Exception describing why the token fired, or None while live."""
        if not self.cancelled:
            return None
        if self._reason is CancelReason.DEADLINE_EXCEEDED:
            return DeadlineExceeded()
        return OperationCancelled()

    def cancel(self, reason: CancelReason = CancelReason.CANCELLED) -> bool:
        """Fire the token. Only the first call has any effect.

        Returns:
            True if this call fired the token, False if it had already fired
        """
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []
            self._event.set()

        for callback in callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception(f"Cancel callback {callback!r} failed")
        self.release()
        return True

    # ─────────────────────────────────────────────────────────────────────
    # Callbacks
    # ─────────────────────────────────────────────────────────────────────

    def add_callback(self, callback: CancelCallback) -> None:
        """Run callback(token) once when the token fires (immediately if it already has)."""
        if not self.cancelled:
            with self._lock:
                if self._reason is None:
                    self._callbacks.append(callback)
                    return
        callback(self)

    def remove_callback(self, callback: CancelCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    # ─────────────────────────────────────────────────────────────────────
    # Waiting
    # ─────────────────────────────────────────────────────────────────────

    def wait(self, timeout: float) -> bool:
        """Block the calling thread for up to timeout seconds.

        Returns:
            True if the token fired (or its deadline passed) first,
            False if the full timeout elapsed
        """
        if self.cancelled:
            return True
        timeout = max(timeout, 0.0)
        remaining = self.remaining()
        if remaining is not None and remaining <= timeout:
            if not self._event.wait(remaining):
                self.cancel(CancelReason.DEADLINE_EXCEEDED)
            return True
        return self._event.wait(timeout)

    async def wait_async(self, timeout: float) -> bool:
        """Suspend the current task for up to timeout seconds.

        Same contract as wait(). A cancel() issued from any thread wakes the
        task through the event loop.
        """
        if self.cancelled:
            return True

        loop = asyncio.get_running_loop()
        woken: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not woken.done():
                woken.set_result(None)

        def _wake(_token: CancelToken) -> None:
            loop.call_soon_threadsafe(_resolve)

        self.add_callback(_wake)
        try:
            timeout = max(timeout, 0.0)
            remaining = self.remaining()
            bound = timeout if remaining is None else min(timeout, remaining)
            done, _ = await asyncio.wait({woken}, timeout=bound)
            if done:
                return True
            if remaining is not None and remaining <= timeout:
                self.cancel(CancelReason.DEADLINE_EXCEEDED)
                return True
            return False
        finally:
            self.remove_callback(_wake)
            if not woken.done():
                woken.cancel()

    # ─────────────────────────────────────────────────────────────────────
    # Derived tokens
    # ─────────────────────────────────────────────────────────────────────

    def with_cancel(self) -> CancelToken:
        """Child token that can be cancelled independently of this one."""
        return self._derive(self._deadline)

    def with_timeout(self, seconds: float) -> CancelToken:
        """Child token that expires after seconds (never later than this token)."""
        return self.with_deadline(time.monotonic() + seconds)

    def with_deadline(self, deadline: float) -> CancelToken:
        """Child token that expires at a monotonic deadline (never later than this token)."""
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return self._derive(deadline)

    def _derive(self, deadline: float | None) -> CancelToken:
        child = CancelToken(deadline=deadline)
        child._parent = self
        self.add_callback(child._on_parent_cancel)
        return child

    def _on_parent_cancel(self, parent: CancelToken) -> None:
        self.cancel(parent._reason or CancelReason.CANCELLED)

    def release(self) -> None:
        """Detach from the parent token. The token keeps its own state."""
        parent, self._parent = self._parent, None
        if parent is not None:
            parent.remove_callback(self._on_parent_cancel)

    def __enter__(self) -> CancelToken:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = self._reason.value if self._reason else "live"
        return f"CancelToken({state}, deadline={self._deadline})"
