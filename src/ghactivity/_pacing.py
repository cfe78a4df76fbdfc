"""
Client-side pacing state.

PollPacer keeps the only mutable state of a RateLimitedClient: when the last
request was sent and how long the server asked us to wait before the next one.
It is not thread-safe; one pacer belongs to one client, used sequentially.
"""

import time
from collections.abc import Callable


class PollPacer:
    """
    Tracks the last request time and the interval learned from the server.

    Both values start at zero, so the first request never waits.

    Example:
        >>> pacer = PollPacer()
        >>> pacer.time_until_next_allowed() <= 0
        True
        >>> pacer.record_request_sent(time.time())
        >>> pacer.update_interval(60.0)
        >>> pacer.time_until_next_allowed() > 0
        True

    Args:
        clock: Time source returning unix seconds (default: time.time).
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        assert clock is not None, "clock cannot be None."

        self._clock = clock
        self.last_request_sent_at: float = 0.0
        self.next_allowed_interval: float = 0.0

    def time_until_next_allowed(self) -> float:
        """
        Seconds the caller must still wait before the next request.

        Zero or negative means no wait is required.
        """
        return self.last_request_sent_at + self.next_allowed_interval - self._clock()

    def record_request_sent(self, at: float) -> None:
        self.last_request_sent_at = at

    def update_interval(self, seconds: float) -> None:
        self.next_allowed_interval = seconds

    def __repr__(self) -> str:
        return (
            f"PollPacer(last_request_sent_at={self.last_request_sent_at!r}, "
            f"next_allowed_interval={self.next_allowed_interval!r})"
        )
