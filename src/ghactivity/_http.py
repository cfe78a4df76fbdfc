"""
HTTP transport abstraction for the github-activity client.

RateLimitedClient never talks to `requests` directly; it goes through an
HttpClient. This keeps pacing and decoding independent of the transport, and
lets tests plug in a fake server.

Available implementations:
    - HttpClient: Abstract base class.
    - RequestsHttpClient: `requests.Session` based transport. Default.

Example:
    >>> from ghactivity._http import RequestsHttpClient
    >>> http_client = RequestsHttpClient()
    >>> response = http_client.get("https://api.github.com/users/octocat/events", timeout=10)
"""

import logging
from abc import ABC, abstractmethod
from typing import override

import requests

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/vnd.github+json",
}


# =============================================================================
# Abstract Base Class
# =============================================================================


class HttpClient(ABC):
    """
    Abstract base class for HTTP transports.

    Implementations may add authentication or other headers, but must not
    retry or pace requests: that is the job of RateLimitedClient.

    Example:
        >>> class MyHttpClient(HttpClient):
        ...     def get(self, url, headers=None, timeout=30):
        ...         return requests.get(url, headers=headers, timeout=timeout)
    """

    @abstractmethod
    def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30,
    ) -> requests.Response:
        """
        Execute a GET request.

        Args:
            url: The full URL to request.
            headers: Additional headers to include.
            timeout: Request timeout in seconds.

        Returns:
            The HTTP response, whatever its status code.

        Raises:
            requests.RequestException: If the HTTP request fails.
        """
        pass


# =============================================================================
# requests Implementation
# =============================================================================


class RequestsHttpClient(HttpClient):
    """
    HTTP transport backed by a `requests.Session`.

    Sends the GitHub JSON media type by default; caller headers take
    precedence. Status codes are not checked here.

    Args:
        session: Session to use. If None, a new one is created.
        default_headers: Headers sent with every request (default: DEFAULT_HEADERS).
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        default_headers: dict[str, str] | None = None,
    ):
        self._session = session or requests.Session()
        self._default_headers = dict(DEFAULT_HEADERS if default_headers is None else default_headers)

    @override
    def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30,
    ) -> requests.Response:
        """
        Execute a GET request through the session.

        Raises:
            AssertionError: If url is empty or timeout is invalid.
            requests.RequestException: If the HTTP request fails.
        """
        assert url, "URL cannot be empty."
        assert timeout is not None, "Timeout cannot be None."
        assert timeout > 0, "Timeout must be greater than 0."

        merged_headers = {**self._default_headers, **(headers or {})}
        logger.debug(f"GET {url} (timeout={timeout:.2f}s)")

        return self._session.get(
            url,
            headers=merged_headers,
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
