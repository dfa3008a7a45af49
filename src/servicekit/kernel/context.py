"""Kernel – cancellation Context and Deadline.

A :class:`Context` is handed down the whole call chain of an operation. It can
be cancelled explicitly or by a deadline; cancelling a context cancels every
context derived from it. Blocking waits go through :meth:`Context.sleep`, which
races the timer against cancellation::

    ctx = Context.background().with_timeout(5.0)
    runner.backoff_ctx(ctx, lambda ctx: fetch(ctx))
"""
from __future__ import annotations

import dataclasses
import threading
import time
import weakref

__all__ = [
    "Context",
    "ContextCancelledError",
    "ContextError",
    "Deadline",
    "DeadlineExceededError",
]


class ContextError(Exception):
    """The context finished before the operation did."""


class ContextCancelledError(ContextError):
    """The context was cancelled explicitly."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceededError(ContextError):
    """The context's deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


@dataclasses.dataclass(frozen=True)
class Deadline:
    """An absolute deadline on the monotonic clock."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(expires_at=time.monotonic() + seconds)

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


def _earliest(a: Deadline | None, b: Deadline | None) -> Deadline | None:
    if a is None:
        return b
    if b is None:
        return a
    return a if a.expires_at <= b.expires_at else b


class Context:
    """Cancellation token with optional deadline, safe to share across threads."""

    def __init__(self, parent: "Context | None" = None, deadline: Deadline | None = None) -> None:
        self._deadline = _earliest(parent.deadline if parent is not None else None, deadline)
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._err: ContextError | None = None
        self._children: weakref.WeakSet[Context] = weakref.WeakSet()
        if parent is not None:
            parent._attach(self)

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    @classmethod
    def background(cls) -> "Context":
        """Root context; never done unless cancelled."""
        return cls()

    def with_cancel(self) -> "Context":
        return Context(self)

    def with_timeout(self, seconds: float) -> "Context":
        return Context(self, Deadline.after(seconds))

    def with_deadline(self, deadline: Deadline) -> "Context":
        return Context(self, deadline)

    @property
    def deadline(self) -> Deadline | None:
        return self._deadline

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        self._finish(ContextCancelledError())

    def error(self) -> ContextError | None:
        """The reason this context is done, or ``None`` while it is live."""
        if self._err is None and self._deadline is not None and self._deadline.is_expired:
            self._finish(DeadlineExceededError())
        return self._err

    @property
    def done(self) -> bool:
        return self.error() is not None

    def raise_if_done(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    def sleep(self, seconds: float) -> None:
        """Sleep *seconds*, raising the context error as soon as it is done."""
        until = time.monotonic() + max(0.0, seconds)
        while True:
            self.raise_if_done()
            remaining = until - time.monotonic()
            if remaining <= 0:
                return
            if self._deadline is not None:
                remaining = min(remaining, self._deadline.remaining_seconds)
            self._done.wait(remaining)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children = list(self._children)
        self._done.set()
        for child in children:
            child._finish(err)

    def _attach(self, child: "Context") -> None:
        with self._lock:
            err = self._err
            if err is None:
                self._children.add(child)
                return
        child._finish(err)
