"""
Exception hierarchy for the github-activity client.

Every failure in pacing, transport, header decoding, or body decoding is
raised to the immediate caller as a subclass of GitHubActivityError.
Header and cancellation errors live next to the code that raises them
(`ghactivity._headers`, `ghactivity._context`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ghactivity._headers import RateLimitHeaders


class GitHubActivityError(Exception):
    """Base class for all errors raised by the github-activity client."""

    pass


class TransportError(GitHubActivityError):
    """
    Raised when the HTTP request itself fails (connection, DNS, timeout...).

    The original `requests.RequestException` is kept as `__cause__` and its
    message is surfaced unchanged.

    Attributes:
        url: The URL being requested.
    """

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(message)


class BodyDecodeError(GitHubActivityError):
    """Raised when a response body is not valid JSON or not of the expected shape."""

    pass


class HTTPStatusError(GitHubActivityError):
    """
    Raised when the server answers with a non-2xx status.

    Attributes:
        status_code: The HTTP status code.
        url: The requested URL.
        rate_limit: Headers decoded from the failed response, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        url: str,
        rate_limit: RateLimitHeaders | None = None,
    ):
        self.status_code = status_code
        self.url = url
        self.rate_limit = rate_limit
        super().__init__(message)

    @classmethod
    def from_status(
        cls,
        status_code: int,
        url: str,
        rate_limit: RateLimitHeaders | None = None,
    ) -> HTTPStatusError:
        return cls(f"HTTP {status_code} for {url}", status_code=status_code, url=url, rate_limit=rate_limit)


class UserNotFoundError(HTTPStatusError):
    """
    Raised when the events endpoint reports that the user does not exist (HTTP 404).

    Callers are expected to special-case this error.

    Attributes:
        user: The user that was looked up.

    Example:
        >>> try:
        ...     events = client.get_user_events(ctx, "nobody-here")
        ... except UserNotFoundError as e:
        ...     print(f"No such user: {e.user}")
    """

    def __init__(self, user: str, url: str, rate_limit: RateLimitHeaders | None = None):
        self.user = user
        super().__init__(f"User '{user}' not found", status_code=404, url=url, rate_limit=rate_limit)


class RateLimitedError(HTTPStatusError):
    """
    Raised when the server throttles the request (HTTP 429, or 403 with no quota left).

    The client never retries. The decoded headers are attached so the caller
    can decide whether and when to retry.

    Attributes:
        rate_limit: Headers decoded from the throttled response.

    Example:
        >>> try:
        ...     client.get_user_events(ctx, "octocat")
        ... except RateLimitedError as e:
        ...     print(f"Throttled until {e.rate_limit.reset_at}")
    """

    rate_limit: RateLimitHeaders

    def __init__(self, status_code: int, url: str, rate_limit: RateLimitHeaders):
        super().__init__(
            f"Rate limit exceeded (HTTP {status_code}) for {url}; "
            f"resets at {rate_limit.reset_at.isoformat()}",
            status_code=status_code,
            url=url,
            rate_limit=rate_limit,
        )
