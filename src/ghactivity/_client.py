"""
Adaptive rate-limited client for the GitHub events API.

RateLimitedClient paces itself according to what the server advertises:

- After each response, it waits X-Poll-Interval seconds before the next request.
- When X-Ratelimit-Remaining drops to 0, it waits until X-Ratelimit-Reset
  instead, whatever poll interval was advertised.
- Before a response is known (or when a request fails), it assumes a
  conservative fallback interval (1 second by default).

Waits honour the caller's RequestContext: cancelling it aborts the wait
immediately, and its deadline bounds the HTTP call. Throttled responses are
never retried; they surface as RateLimitedError with the decoded headers.

The client is NOT thread-safe. Use one instance per rate-limit budget and
serialize calls on it.

Example:
    >>> from ghactivity import RateLimitedClient, RequestContext
    >>> client = RateLimitedClient()
    >>> events = client.get_user_events(RequestContext(timeout=60), "octocat")
    >>> for event in events:
    ...     print(event.type, event.repo.name)
"""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from ghactivity._context import DeadlineExceededError, RequestContext
from ghactivity._errors import (
    BodyDecodeError,
    HTTPStatusError,
    RateLimitedError,
    TransportError,
    UserNotFoundError,
)
from ghactivity._headers import RateLimitHeaders, decode_headers
from ghactivity._http import HttpClient
from ghactivity._models import Event
from ghactivity._pacing import PollPacer

if TYPE_CHECKING:
    from ghactivity._config import ClientConfig

logger = logging.getLogger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_TOO_MANY_REQUESTS = 429


@dataclass(frozen=True)
class ClientOptions:
    """
    Configuration options for RateLimitedClient.

    Fields set to None use values from global config (GHA.config.client).

    Attributes:
        request_timeout: Upper bound in seconds for a single HTTP call.
        fallback_poll_interval: Interval assumed before a response is known.
        user_agent: User-Agent header value.

    Example:
        >>> options = ClientOptions(request_timeout=10)
        >>> client = RateLimitedClient(options=options)
    """

    request_timeout: float | None = None
    fallback_poll_interval: float | None = None
    user_agent: str | None = None

    def with_defaults_from(self, cfg: "ClientConfig") -> "ClientOptions":
        """Return a new ClientOptions with None values filled from config."""
        return ClientOptions(
            request_timeout=self.request_timeout if self.request_timeout is not None else cfg.request_timeout,
            fallback_poll_interval=(
                self.fallback_poll_interval if self.fallback_poll_interval is not None else cfg.fallback_poll_interval
            ),
            user_agent=self.user_agent if self.user_agent is not None else cfg.user_agent,
        )


class RateLimitedClient:
    """
    Synchronous, self-pacing client for a user's GitHub activity feed.

    Attributes:
        base_url: Base address of the API (no trailing slash).
        options: Resolved client options.
        http_client: Transport used for the requests.
        last_rate_limit: Headers decoded from the most recent response, or None.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        base_url: str | None = None,
        options: ClientOptions | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the client.

        Args:
            http_client: Transport. If None, uses RequestsHttpClient.
            base_url: API base address. If None, uses GHA.config.client.base_url.
            options: Client options. None fields are resolved from GHA.config.client.
            clock: Time source returning unix seconds. Used for pacing and
                header decoding; tests inject a fake one.

        Raises:
            AssertionError: If base_url is empty or an option is invalid.
        """
        from ghactivity._config import GHA
        cfg = GHA.config.client

        resolved_options = (options or ClientOptions()).with_defaults_from(cfg)

        if base_url is None:
            base_url = cfg.base_url

        if http_client is None:
            from ghactivity._http import RequestsHttpClient
            http_client = RequestsHttpClient()

        assert base_url, "Client base_url cannot be empty."
        assert resolved_options.request_timeout is not None and resolved_options.request_timeout > 0, \
            "request_timeout must be greater than 0."
        assert resolved_options.fallback_poll_interval is not None and resolved_options.fallback_poll_interval >= 0, \
            "fallback_poll_interval must be >= 0."

        self.base_url = base_url.rstrip("/")
        self.options = resolved_options
        self.http_client: HttpClient = http_client
        self.last_rate_limit: RateLimitHeaders | None = None
        self._clock = clock
        self._pacer = PollPacer(clock=clock)

    def time_until_next_allowed(self) -> float:
        """Seconds until the next request may be sent (<= 0 means right away)."""
        return self._pacer.time_until_next_allowed()

    def get(self, ctx: RequestContext, url: str) -> tuple[requests.Response, RateLimitHeaders]:
        """
        Send a paced GET request.

        Waits as long as the pacer requires, sends the request, decodes the
        rate-limit headers and learns the interval for the next call.

        Args:
            ctx: Cancellation and deadline for this call.
            url: Full URL to request.

        Returns:
            The response (body not yet consumed; caller must close it) and
            its decoded rate-limit headers.

        Raises:
            RequestCancelledError: If `ctx` is cancelled before the request is sent.
            DeadlineExceededError: If `ctx` deadline is reached while waiting.
            TransportError: If the HTTP request fails.
            HeaderDecodeError: If a rate-limit header is malformed.
            RateLimitedError: On HTTP 429, or HTTP 403 with no quota left.
            HTTPStatusError: On any other status >= 400.
        """
        assert ctx is not None, "🌀 Sanity check | RequestContext can not be None."
        assert url, "🌀 Sanity check | URL can not be empty."

        wait_time = self._pacer.time_until_next_allowed()
        if wait_time > 0:
            logger.debug(f"Pacing: waiting {wait_time:.2f}s before GET {url}")
        ctx.wait(wait_time)

        now = self._clock()
        self._pacer.record_request_sent(now)
        # Stays in effect if the call below fails or headers can't be read
        self._pacer.update_interval(self.options.fallback_poll_interval)

        response = self._send(ctx, url)

        try:
            rate_limit = decode_headers(response.headers, RateLimitHeaders, clock=self._clock)
        except Exception:
            response.close()
            raise

        self.last_rate_limit = rate_limit
        self._learn_interval(rate_limit)

        status_code = response.status_code
        if status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            response.close()
            if status_code == _HTTP_TOO_MANY_REQUESTS or (
                status_code == _HTTP_FORBIDDEN and rate_limit.remaining == 0
            ):
                logger.warning(
                    f"⚠️ Rate limited (HTTP {status_code}) on {url}. "
                    f"Quota resets at {rate_limit.reset_at.isoformat()}."
                )
                raise RateLimitedError(status_code=status_code, url=url, rate_limit=rate_limit)
            raise HTTPStatusError.from_status(status_code, url, rate_limit)

        logger.info(
            f"GET {url} -> {status_code} "
            f"(remaining={rate_limit.remaining}/{rate_limit.limit}, "
            f"next request in {self._pacer.next_allowed_interval:.1f}s)"
        )
        return response, rate_limit

    def get_json(self, ctx: RequestContext, url: str) -> Any:
        """
        Send a paced GET request and decode its JSON body.

        Raises:
            BodyDecodeError: If the body is not valid JSON.
            Everything `get()` raises.
        """
        response, _ = self.get(ctx, url)
        try:
            body = response.content
        except requests.RequestException as e:
            raise TransportError(str(e), url=url) from e
        finally:
            response.close()

        try:
            return json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise BodyDecodeError(f"Invalid JSON body from {url}: {e}") from e

    def get_user_events(self, ctx: RequestContext, user: str) -> list[Event]:
        """
        Fetch the first page of a user's public events, newest first.

        Args:
            ctx: Cancellation and deadline for this call.
            user: GitHub login.

        Returns:
            Events in the order the server sent them.

        Raises:
            UserNotFoundError: If the user does not exist (HTTP 404).
            BodyDecodeError: If the body is not a JSON array of events.
            Everything `get()` raises.
        """
        assert user, "User cannot be empty."

        url = self.user_events_url(user)
        try:
            data = self.get_json(ctx, url)
        except HTTPStatusError as e:
            if e.status_code == _HTTP_NOT_FOUND:
                raise UserNotFoundError(user, url=url, rate_limit=e.rate_limit) from e
            raise

        if not isinstance(data, list):
            raise BodyDecodeError(f"Expected a JSON array of events from {url}, got {type(data).__name__}")

        events = [Event.from_dict(item) for item in data]
        logger.info(f"Fetched {len(events)} events for user '{user}'")
        return events

    def user_events_url(self, user: str) -> str:
        """Return `{base_url}/users/{user}/events`, with the user path-escaped."""
        return f"{self.base_url}/users/{quote(user, safe='')}/events"

    def _send(self, ctx: RequestContext, url: str) -> requests.Response:
        ctx.raise_if_done()

        timeout = self.options.request_timeout
        assert timeout is not None, "🌀 Sanity check | request_timeout must be set after with_defaults_from()"
        remaining = ctx.remaining()
        if remaining is not None:
            if remaining <= 0:
                # Deadline passed since the check above
                raise DeadlineExceededError(ctx.timeout)
            timeout = min(timeout, remaining)

        headers = {"User-Agent": self.options.user_agent or ""}
        try:
            response = self.http_client.get(url, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            logger.debug(f"GET {url} failed: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
            raise TransportError(str(e), url=url) from e

        assert isinstance(response, requests.Response), \
            f"🌀 Sanity check | Object returned by `get` method is not an instance of `requests.Response`. ({response.__class__})"
        return response

    def _learn_interval(self, rate_limit: RateLimitHeaders) -> None:
        if rate_limit.remaining == 0:
            # No request can succeed before the window resets, whatever the poll hint says.
            # Measured from the send time, since the pacer adds the interval to it.
            self._pacer.update_interval(rate_limit.seconds_until_reset(self._pacer.last_request_sent_at))
        else:
            self._pacer.update_interval(rate_limit.poll_interval)
