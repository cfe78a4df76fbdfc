"""
Caller cancellation and deadlines.

A RequestContext is passed to every client call. It lets another thread
abort a pending wait (via `cancel()`), and it bounds the whole call with an
optional deadline. Waits are implemented with `threading.Event.wait`, so a
cancellation wakes the waiting thread immediately.

Example:
    >>> ctx = RequestContext(timeout=30.0)
    >>> events = client.get_user_events(ctx, "octocat")
    >>>
    >>> # From another thread
    >>> ctx.cancel()
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from ghactivity._errors import GitHubActivityError


class RequestCancelledError(GitHubActivityError):
    """Raised when the caller cancelled the request context."""

    pass


class DeadlineExceededError(RequestCancelledError):
    """
    Raised when the request context deadline is reached.

    Attributes:
        timeout: The timeout the context was created with, in seconds.
    """

    def __init__(self, timeout: float | None):
        self.timeout = timeout
        super().__init__(f"Deadline exceeded (timeout={timeout}s)")


class RequestContext:
    """
    Cancellation signal plus optional deadline for one or more client calls.

    Args:
        timeout: Seconds from now until the deadline. None means no deadline.
        clock: Monotonic time source used for the deadline.
    """

    def __init__(
        self,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        assert timeout is None or timeout > 0, "timeout must be > 0 or None."

        self.timeout = timeout
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> RequestContext:
        """Return a context with no deadline. It is only done if `cancel()` is called."""
        return cls()

    def cancel(self) -> None:
        """Cancel the context. Safe to call from any thread, and more than once."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left until the deadline (never negative), or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def raise_if_done(self) -> None:
        """
        Raise if the context is cancelled or its deadline has passed.

        Raises:
            RequestCancelledError: If `cancel()` was called.
            DeadlineExceededError: If the deadline has passed.
        """
        if self.cancelled:
            raise RequestCancelledError("Request cancelled by caller")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError(self.timeout)

    def wait(self, seconds: float) -> None:
        """
        Block for `seconds`, returning early only by raising.

        Raises:
            RequestCancelledError: As soon as the context is cancelled.
            DeadlineExceededError: When the deadline falls inside the wait.
        """
        self.raise_if_done()
        if seconds <= 0:
            return

        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            if self._wait_for_cancel(remaining):
                raise RequestCancelledError("Request cancelled by caller")
            raise DeadlineExceededError(self.timeout)

        if self._wait_for_cancel(seconds):
            raise RequestCancelledError("Request cancelled by caller")

    def _wait_for_cancel(self, seconds: float) -> bool:
        """Wait up to `seconds`; return True if cancelled meanwhile."""
        return self._cancelled.wait(seconds)

    def __repr__(self) -> str:
        return f"RequestContext(timeout={self.timeout!r}, cancelled={self.cancelled!r})"
