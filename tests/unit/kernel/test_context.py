"""Unit tests for Context cancellation and deadlines."""

from __future__ import annotations

import threading
import time

import pytest

from servicekit.kernel.context import (
    Context,
    ContextCancelledError,
    ContextError,
    Deadline,
    DeadlineExceededError,
)


class TestContext:
    def test_background_is_live(self) -> None:
        ctx = Context.background()
        assert not ctx.done
        assert ctx.error() is None
        assert ctx.deadline is None

    def test_cancel(self) -> None:
        ctx = Context.background().with_cancel()
        ctx.cancel()
        assert ctx.done
        assert isinstance(ctx.error(), ContextCancelledError)
        with pytest.raises(ContextCancelledError, match="context canceled"):
            ctx.raise_if_done()

    def test_cancel_propagates_to_children(self) -> None:
        parent = Context.background().with_cancel()
        child = parent.with_cancel()
        grandchild = child.with_timeout(60)
        parent.cancel()
        assert isinstance(grandchild.error(), ContextCancelledError)

    def test_child_cancel_does_not_touch_parent(self) -> None:
        parent = Context.background()
        child = parent.with_cancel()
        child.cancel()
        assert not parent.done

    def test_child_of_done_parent_is_done(self) -> None:
        parent = Context.background().with_cancel()
        parent.cancel()
        assert parent.with_cancel().done

    def test_deadline_expires(self) -> None:
        ctx = Context.background().with_timeout(0.01)
        time.sleep(0.02)
        assert isinstance(ctx.error(), DeadlineExceededError)

    def test_child_inherits_earlier_deadline(self) -> None:
        parent = Context.background().with_timeout(0.5)
        child = parent.with_timeout(60)
        assert child.deadline is parent.deadline

    def test_with_deadline(self) -> None:
        deadline = Deadline.after(30)
        ctx = Context.background().with_deadline(deadline)
        assert ctx.deadline is deadline
        assert 0 < deadline.remaining_seconds <= 30
        assert not deadline.is_expired


class TestContextSleep:
    def test_sleep_completes(self) -> None:
        start = time.monotonic()
        Context.background().sleep(0.01)
        assert time.monotonic() - start >= 0.01

    def test_sleep_interrupted_by_cancel(self) -> None:
        ctx = Context.background().with_cancel()
        threading.Timer(0.05, ctx.cancel).start()
        start = time.monotonic()
        with pytest.raises(ContextCancelledError):
            ctx.sleep(10)
        assert time.monotonic() - start < 2

    def test_sleep_interrupted_by_deadline(self) -> None:
        ctx = Context.background().with_timeout(0.05)
        start = time.monotonic()
        with pytest.raises(DeadlineExceededError):
            ctx.sleep(10)
        assert time.monotonic() - start < 2

    def test_errors_share_a_base(self) -> None:
        assert issubclass(ContextCancelledError, ContextError)
        assert issubclass(DeadlineExceededError, ContextError)
