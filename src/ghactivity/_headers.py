"""
Rate-limit header decoding for the GitHub REST API.

This module maps a raw (case-insensitive) header collection onto a typed,
immutable record. The mapping is declared once, as dataclass field metadata,
and turned into a static schema table at import time:

    - Each field declares its decoding kind via ``metadata={"kind": HeaderKind.X}``.
    - The wire header name is either ``metadata["header"]`` or derived from the
      field identifier by `header_name_for_field()`.

Supported kinds:
    - INTEGER: absent -> 0, malformed -> HeaderDecodeError.
    - STRING: absent -> "", otherwise the raw value verbatim.
    - DURATION: integer seconds; absent -> 0.0, malformed -> HeaderDecodeError.
    - TIMESTAMP: unix seconds; absent -> now, malformed or negative -> HeaderDecodeError.

Example:
    >>> from ghactivity._headers import decode_headers
    >>> rate_limit = decode_headers({"X-Ratelimit-Remaining": "42"})
    >>> rate_limit.remaining
    42
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from ghactivity._errors import GitHubActivityError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


# =============================================================================
# Exceptions
# =============================================================================


class HeaderDecodeError(GitHubActivityError):
    """
    Raised when a response header cannot be decoded into its declared type.

    Usually means the server changed its protocol, or sent garbage.

    Attributes:
        header: The wire header name.
        value: The raw header value (None when not applicable).
    """

    def __init__(self, message: str, header: str | None = None, value: str | None = None):
        self.header = header
        self.value = value
        super().__init__(message)


class UnsupportedHeaderKindError(HeaderDecodeError):
    """
    Raised when a header record declares a field the decoder cannot handle.

    This is a programming error: the record schema and the decoder are out of
    sync. It is raised while building the schema table, which for
    `RateLimitHeaders` happens at import time.
    """

    def __init__(self, record_type: type, field_name: str, kind: Any):
        self.record_type = record_type
        self.field_name = field_name
        self.kind = kind
        super().__init__(
            f"Unsupported header kind {kind!r} for field '{record_type.__name__}.{field_name}'. "
            f"Supported kinds are: {[k.value for k in HeaderKind]}."
        )


# =============================================================================
# Header name derivation
# =============================================================================


def header_name_for_field(identifier: str) -> str:
    """
    Derive the wire header name from a field identifier.

    CamelCase identifiers get a hyphen before every upper-case letter except
    the first character, so a single lower-case word is kept as is.
    Identifiers containing underscores are split on them and each word is
    capitalized. Both spellings of the same words yield the same header name.

    Args:
        identifier: The field identifier (e.g. ``XRatelimitLimit`` or ``x_ratelimit_limit``).

    Returns:
        The header name (e.g. ``X-Ratelimit-Limit``).

    Raises:
        ValueError: If the identifier is empty.

    Example:
        >>> header_name_for_field("XPollInterval")
        'X-Poll-Interval'
        >>> header_name_for_field("x_ratelimit_reset")
        'X-Ratelimit-Reset'
    """
    if not identifier:
        raise ValueError("Field identifier cannot be empty.")

    if "_" in identifier:
        words = [word for word in identifier.split("_") if word]
        return "-".join(word[0].upper() + word[1:] for word in words)

    parts = [identifier[0]]
    for char in identifier[1:]:
        if char.isupper():
            parts.append("-")
        parts.append(char)
    return "".join(parts)


# =============================================================================
# Typed parsers
# =============================================================================


def parse_int_header(name: str, raw: str | None) -> int:
    """Parse an integer header. Absent or empty means 0."""
    if not raw:
        return 0
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise HeaderDecodeError(f"Malformed header {name}: {raw!r} is not an integer.", header=name, value=raw)
    try:
        return int(raw)
    except ValueError as e:
        # More digits than int() accepts by default
        raise HeaderDecodeError(f"Malformed header {name}: {raw!r} is too long.", header=name, value=raw) from e


def parse_str_header(name: str, raw: str | None) -> str:
    """Return the raw header value verbatim, or an empty string when absent."""
    return raw if raw is not None else ""


def parse_duration_header(name: str, raw: str | None) -> float:
    """Parse a count of seconds into a duration in seconds. Absent means 0.0."""
    seconds = parse_int_header(name, raw)
    try:
        return float(seconds)
    except OverflowError as e:
        raise HeaderDecodeError(
            f"Malformed header {name}: duration {raw!r} out of range.", header=name, value=raw
        ) from e


def parse_timestamp_header(
    name: str,
    raw: str | None,
    clock: Callable[[], float] = time.time,
) -> datetime:
    """
    Parse unix seconds into an aware UTC datetime.

    An absent header means "now", as reported by `clock`.

    Raises:
        HeaderDecodeError: If the value is not an integer, is negative, or is
            out of the range `datetime` can represent.
    """
    if not raw:
        return datetime.fromtimestamp(clock(), tz=UTC)

    seconds = parse_int_header(name, raw)
    if seconds < 0:
        raise HeaderDecodeError(
            f"Malformed header {name}: invalid negative timestamp {raw!r}.", header=name, value=raw
        )
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, ValueError, OSError) as e:
        raise HeaderDecodeError(
            f"Malformed header {name}: timestamp {raw!r} out of range.", header=name, value=raw
        ) from e


class HeaderKind(Enum):
    """Decoding kinds a header field may declare."""

    INTEGER = "integer"
    STRING = "string"
    DURATION = "duration"
    TIMESTAMP = "timestamp"


def _kind_field(kind: HeaderKind, header: str | None = None, default: Any = None) -> Any:
    metadata: dict[str, Any] = {"kind": kind}
    if header:
        metadata["header"] = header
    return field(default=default, metadata=metadata)


# =============================================================================
# Header record
# =============================================================================


@dataclass(frozen=True)
class RateLimitHeaders:
    """
    Poll and rate-limit state advertised by a single response.

    Field names follow the wire header names, so each header name is derived
    from its field. Friendlier read-only aliases are provided as properties.

    Attributes:
        x_poll_interval: Minimum seconds before the next poll (X-Poll-Interval).
        x_ratelimit_limit: Requests allowed per window (X-Ratelimit-Limit).
        x_ratelimit_remaining: Requests left in the current window (X-Ratelimit-Remaining).
        x_ratelimit_used: Requests consumed in the current window (X-Ratelimit-Used).
        x_ratelimit_reset: When the current window resets (X-Ratelimit-Reset).
        x_ratelimit_resource: Named rate-limit bucket (X-Ratelimit-Resource).

    Example:
        >>> rate_limit = decode_headers(response.headers)
        >>> if rate_limit.remaining == 0:
        ...     print(f"Quota exhausted until {rate_limit.reset_at:%H:%M:%S}")
    """

    x_poll_interval: float = _kind_field(HeaderKind.DURATION, default=0.0)
    x_ratelimit_limit: int = _kind_field(HeaderKind.INTEGER, default=0)
    x_ratelimit_remaining: int = _kind_field(HeaderKind.INTEGER, default=0)
    x_ratelimit_used: int = _kind_field(HeaderKind.INTEGER, default=0)
    x_ratelimit_reset: datetime = _kind_field(
        HeaderKind.TIMESTAMP, default=datetime.fromtimestamp(0, tz=UTC)
    )
    x_ratelimit_resource: str = _kind_field(HeaderKind.STRING, default="")

    @property
    def poll_interval(self) -> float:
        return self.x_poll_interval

    @property
    def limit(self) -> int:
        return self.x_ratelimit_limit

    @property
    def remaining(self) -> int:
        return self.x_ratelimit_remaining

    @property
    def used(self) -> int:
        return self.x_ratelimit_used

    @property
    def reset_at(self) -> datetime:
        return self.x_ratelimit_reset

    @property
    def resource(self) -> str:
        return self.x_ratelimit_resource

    def seconds_until_reset(self, now: float) -> float:
        """Seconds from `now` (unix time) until the window resets, clamped to >= 0."""
        return max(0.0, self.x_ratelimit_reset.timestamp() - now)


# =============================================================================
# Schema table and decoder
# =============================================================================


@dataclass(frozen=True)
class HeaderField:
    """One row of a header schema table."""

    name: str
    header: str
    kind: HeaderKind


def build_header_schema(record_type: type) -> tuple[HeaderField, ...]:
    """
    Build the static schema table for a header record dataclass.

    Raises:
        TypeError: If `record_type` is not a dataclass.
        UnsupportedHeaderKindError: If a field declares no kind or an unknown one.
    """
    if not (isinstance(record_type, type) and is_dataclass(record_type)):
        raise TypeError(f"{record_type!r} is not a dataclass type.")

    schema = []
    for f in fields(record_type):
        kind = f.metadata.get("kind")
        if not isinstance(kind, HeaderKind):
            raise UnsupportedHeaderKindError(record_type, f.name, kind)
        header = f.metadata.get("header") or header_name_for_field(f.name)
        schema.append(HeaderField(name=f.name, header=header, kind=kind))
    return tuple(schema)


_SCHEMAS: dict[type, tuple[HeaderField, ...]] = {
    RateLimitHeaders: build_header_schema(RateLimitHeaders),
}


def _schema_for(record_type: type) -> tuple[HeaderField, ...]:
    schema = _SCHEMAS.get(record_type)
    if schema is None:
        schema = build_header_schema(record_type)
        _SCHEMAS[record_type] = schema
    return schema


def _lookup(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive; requests' CaseInsensitiveDict is not.
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def decode_headers(
    headers: Mapping[str, str],
    record_type: type[T] = RateLimitHeaders,  # type: ignore[assignment]
    clock: Callable[[], float] = time.time,
) -> T:
    """
    Decode a header collection into a fully populated header record.

    Args:
        headers: Header mapping (e.g. ``requests.Response.headers``).
        record_type: The header record dataclass (default: RateLimitHeaders).
        clock: Time source for absent timestamps.

    Returns:
        A new, immutable instance of `record_type`.

    Raises:
        HeaderDecodeError: If any header value is malformed.
        UnsupportedHeaderKindError: If `record_type` declares an unsupported field.
    """
    values: dict[str, Any] = {}
    for header_field in _schema_for(record_type):
        name = header_field.header
        raw = _lookup(headers, name)
        logger.debug(f"Decoding header {name}: {raw!r}")

        if header_field.kind is HeaderKind.INTEGER:
            values[header_field.name] = parse_int_header(name, raw)
        elif header_field.kind is HeaderKind.STRING:
            values[header_field.name] = parse_str_header(name, raw)
        elif header_field.kind is HeaderKind.DURATION:
            values[header_field.name] = parse_duration_header(name, raw)
        elif header_field.kind is HeaderKind.TIMESTAMP:
            values[header_field.name] = parse_timestamp_header(name, raw, clock)
        else:
            raise UnsupportedHeaderKindError(record_type, header_field.name, header_field.kind)

    return record_type(**values)
