"""Tests for CancelToken."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from retrycase import CancelReason, CancelToken, DeadlineExceeded, ErrorCode, OperationCancelled


def test_fresh_token_is_live() -> None:
    token = CancelToken()
    assert not token.cancelled
    assert token.reason is None
    assert token.error() is None
    assert token.remaining() is None


def test_cancel_only_fires_once() -> None:
    token = CancelToken()
    assert token.cancel()
    assert not token.cancel(CancelReason.DEADLINE_EXCEEDED)
    assert token.reason is CancelReason.CANCELLED


def test_error_describes_reason() -> None:
    token = CancelToken()
    token.cancel()
    err = token.error()
    assert isinstance(err, OperationCancelled)
    assert not isinstance(err, DeadlineExceeded)
    assert err.code is ErrorCode.CANCELLED


def test_deadline_expires_lazily() -> None:
    token = CancelToken().with_timeout(0.01)
    time.sleep(0.02)
    assert token.cancelled
    assert token.reason is CancelReason.DEADLINE_EXCEEDED
    err = token.error()
    assert isinstance(err, DeadlineExceeded)
    assert err.code is ErrorCode.DEADLINE_EXCEEDED


def test_wait_times_out_without_cancel() -> None:
    token = CancelToken()
    start = time.monotonic()
    assert not token.wait(0.02)
    assert time.monotonic() - start >= 0.015


def test_wait_wakes_on_cancel_from_thread() -> None:
    token = CancelToken()
    threading.Timer(0.02, token.cancel).start()
    start = time.monotonic()
    assert token.wait(5.0)
    assert time.monotonic() - start < 1.0


def test_wait_stops_at_deadline() -> None:
    token = CancelToken().with_timeout(0.02)
    start = time.monotonic()
    assert token.wait(5.0)
    assert time.monotonic() - start < 1.0
    assert token.reason is CancelReason.DEADLINE_EXCEEDED


def test_negative_timeout_is_immediate() -> None:
    assert not CancelToken().wait(-1.0)


# ─────────────────────────────────────────────────────────────────────────────
# Derived Tokens
# ─────────────────────────────────────────────────────────────────────────────


def test_parent_cancel_propagates_to_child() -> None:
    parent = CancelToken()
    child = parent.with_cancel()
    parent.cancel()
    assert child.cancelled
    assert child.reason is CancelReason.CANCELLED


def test_child_cancel_does_not_touch_parent() -> None:
    parent = CancelToken()
    child = parent.with_timeout(60.0)
    child.cancel()
    assert not parent.cancelled


def test_child_of_cancelled_parent_is_cancelled() -> None:
    parent = CancelToken()
    parent.cancel()
    assert parent.with_cancel().cancelled


def test_child_deadline_never_exceeds_parent() -> None:
    parent = CancelToken().with_timeout(1.0)
    child = parent.with_timeout(60.0)
    assert child.deadline == parent.deadline


def test_released_child_ignores_parent() -> None:
    parent = CancelToken()
    with parent.with_cancel() as child:
        pass
    parent.cancel()
    assert not child.cancelled


def test_callbacks_run_once_and_late_callbacks_run_immediately() -> None:
    token = CancelToken()
    seen: list[CancelToken] = []
    token.add_callback(seen.append)
    token.cancel()
    token.cancel()
    assert seen == [token]

    token.add_callback(seen.append)
    assert seen == [token, token]


def test_removed_callback_does_not_run() -> None:
    token = CancelToken()
    seen: list[CancelToken] = []
    token.add_callback(seen.append)
    token.remove_callback(seen.append)
    token.cancel()
    assert seen == []


def test_failing_callback_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    token = CancelToken()
    seen: list[CancelToken] = []

    def boom(_: CancelToken) -> None:
        raise RuntimeError("boom")

    token.add_callback(boom)
    token.add_callback(seen.append)
    token.cancel()
    assert seen == [token]
    assert "failed" in caplog.text


# ─────────────────────────────────────────────────────────────────────────────
# Async
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_wait_async_times_out() -> None:
    assert not await CancelToken().wait_async(0.01)


@pytest.mark.asyncio
async def test_wait_async_wakes_on_thread_cancel() -> None:
    token = CancelToken()
    threading.Timer(0.02, token.cancel).start()
    start = time.monotonic()
    assert await token.wait_async(5.0)
    assert time.monotonic() - start < 1.0


@pytest.mark.asyncio
async def test_wait_async_stops_at_deadline() -> None:
    token = CancelToken().with_timeout(0.02)
    assert await token.wait_async(5.0)
    assert token.reason is CancelReason.DEADLINE_EXCEEDED


@pytest.mark.asyncio
async def test_wait_async_wakes_all_waiters() -> None:
    token = CancelToken()
    waiters = [asyncio.create_task(token.wait_async(5.0)) for _ in range(3)]
    await asyncio.sleep(0.01)
    token.cancel()
    assert await asyncio.gather(*waiters) == [True, True, True]
