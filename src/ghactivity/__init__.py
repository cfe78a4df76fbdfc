"""
github-activity: summarize a GitHub user's recent public activity.

The core is RateLimitedClient, a self-pacing client for the GitHub events
API. It waits as long as the server asks (X-Poll-Interval), holds off until
the quota window resets when X-Ratelimit-Remaining hits zero, and decodes the
rate-limit headers into a typed RateLimitHeaders record.

Quick Start:
    >>> from ghactivity import RateLimitedClient, RequestContext, build_digest, print_digest
    >>> client = RateLimitedClient()
    >>> events = client.get_user_events(RequestContext(timeout=60), "octocat")
    >>> print_digest(build_digest(events))

Global Configuration:
    >>> from ghactivity import GHA
    >>> GHA.configure(client={"base_url": "https://github.example.com/api/v3"})

Main Classes:
    - RateLimitedClient: Paced GET client with get(), get_json() and get_user_events().
    - ClientOptions: Per-client overrides of GHA.config.client.
    - RequestContext: Cancellation and deadline for client calls.
    - RateLimitHeaders: Decoded X-Poll-Interval / X-Ratelimit-* headers.
    - PollPacer: The client's pacing state.
    - Event, Actor, Repo, Organisation: Activity feed records.
    - EventsDigest: Summary built by build_digest().

HTTP Transport:
    - HttpClient: Abstract base class for transports.
    - RequestsHttpClient: requests.Session based transport. Default.

Errors:
    - GitHubActivityError: Base class.
    - TransportError, HeaderDecodeError, UnsupportedHeaderKindError,
      BodyDecodeError, PayloadDecodeError, HTTPStatusError, UserNotFoundError,
      RateLimitedError, RequestCancelledError, DeadlineExceededError.
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("github-activity")
except PackageNotFoundError:
    __version__ = "0.0.0"

from ghactivity._client import ClientOptions, RateLimitedClient
from ghactivity._config import (
    GHA,
    CliConfig,
    ClientConfig,
    ConfigEntry,
    ConfigEnvVarError,
    ConfigValidationError,
    GHAConfig,
)
from ghactivity._context import (
    DeadlineExceededError,
    RequestCancelledError,
    RequestContext,
)
from ghactivity._digest import (
    EventsDigest,
    IssuesPayload,
    PayloadDecodeError,
    PushPayload,
    build_digest,
    format_digest,
    print_digest,
)
from ghactivity._errors import (
    BodyDecodeError,
    GitHubActivityError,
    HTTPStatusError,
    RateLimitedError,
    TransportError,
    UserNotFoundError,
)
from ghactivity._headers import (
    HeaderDecodeError,
    HeaderKind,
    RateLimitHeaders,
    UnsupportedHeaderKindError,
    decode_headers,
    header_name_for_field,
)
from ghactivity._http import HttpClient, RequestsHttpClient
from ghactivity._models import Actor, Event, Organisation, Repo
from ghactivity._pacing import PollPacer

__all__ = [
    "__version__",
    # Configuration
    "GHA",
    "GHAConfig",
    "ClientConfig",
    "CliConfig",
    "ConfigEntry",
    "ConfigEnvVarError",
    "ConfigValidationError",
    # Client
    "RateLimitedClient",
    "ClientOptions",
    "RequestContext",
    "PollPacer",
    # Headers
    "RateLimitHeaders",
    "HeaderKind",
    "decode_headers",
    "header_name_for_field",
    # HTTP Transport
    "HttpClient",
    "RequestsHttpClient",
    # Models
    "Event",
    "Actor",
    "Repo",
    "Organisation",
    # Digest
    "EventsDigest",
    "PushPayload",
    "IssuesPayload",
    "build_digest",
    "format_digest",
    "print_digest",
    # Errors
    "GitHubActivityError",
    "TransportError",
    "HeaderDecodeError",
    "UnsupportedHeaderKindError",
    "BodyDecodeError",
    "PayloadDecodeError",
    "HTTPStatusError",
    "UserNotFoundError",
    "RateLimitedError",
    "RequestCancelledError",
    "DeadlineExceededError",
]
