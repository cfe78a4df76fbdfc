"""Tests for rate-limit header decoding."""

import dataclasses
import unittest
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest
from requests.structures import CaseInsensitiveDict

from ghactivity import (
    HeaderDecodeError,
    HeaderKind,
    RateLimitHeaders,
    UnsupportedHeaderKindError,
    decode_headers,
    header_name_for_field,
)
from ghactivity._headers import build_header_schema, parse_timestamp_header

# =============================================================================
# Header Name Derivation Tests
# =============================================================================


class TestHeaderNameForField:
    """Tests for header_name_for_field()."""

    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("XPollInterval", "X-Poll-Interval"),
            ("XRatelimitLimit", "X-Ratelimit-Limit"),
            ("XRatelimitReset", "X-Ratelimit-Reset"),
            ("x_poll_interval", "X-Poll-Interval"),
            ("x_ratelimit_remaining", "X-Ratelimit-Remaining"),
            ("etag", "etag"),
            ("Date", "Date"),
        ],
    )
    def test_derives_wire_name(self, identifier, expected):
        assert header_name_for_field(identifier) == expected

    def test_both_spellings_yield_same_name(self):
        """CamelCase and snake_case spellings of the same words should agree."""
        assert header_name_for_field("XRatelimitUsed") == header_name_for_field("x_ratelimit_used")

    def test_empty_identifier_is_rejected(self):
        with pytest.raises(ValueError):
            header_name_for_field("")


# =============================================================================
# RateLimitHeaders Decoding Tests
# =============================================================================


class TestDecodeRateLimitHeaders(unittest.TestCase):
    """Tests for decode_headers() with the default RateLimitHeaders record."""

    def test_decodes_all_headers(self):
        """Should populate every field from its wire header."""
        headers = {
            "X-Poll-Interval": "60",
            "X-Ratelimit-Limit": "60",
            "X-Ratelimit-Remaining": "57",
            "X-Ratelimit-Used": "3",
            "X-Ratelimit-Reset": "1700000004",
            "X-Ratelimit-Resource": "core",
        }

        rate_limit = decode_headers(headers)

        self.assertEqual(rate_limit.poll_interval, 60.0)
        self.assertEqual(rate_limit.limit, 60)
        self.assertEqual(rate_limit.remaining, 57)
        self.assertEqual(rate_limit.used, 3)
        self.assertEqual(rate_limit.reset_at, datetime.fromtimestamp(1700000004, tz=UTC))
        self.assertEqual(rate_limit.resource, "core")

    def test_aliases_match_wire_named_fields(self):
        rate_limit = decode_headers({"X-Poll-Interval": "5", "X-Ratelimit-Remaining": "2"})

        self.assertEqual(rate_limit.x_poll_interval, rate_limit.poll_interval)
        self.assertEqual(rate_limit.x_ratelimit_remaining, rate_limit.remaining)

    def test_absent_headers_use_zero_values_and_now(self):
        """Absent integers decode as 0, absent strings as "", absent timestamps as now."""
        rate_limit = decode_headers({}, clock=lambda: 1234.0)

        self.assertEqual(rate_limit.poll_interval, 0.0)
        self.assertEqual(rate_limit.limit, 0)
        self.assertEqual(rate_limit.remaining, 0)
        self.assertEqual(rate_limit.used, 0)
        self.assertEqual(rate_limit.resource, "")
        self.assertEqual(rate_limit.reset_at, datetime.fromtimestamp(1234, tz=UTC))

    def test_lookup_is_case_insensitive_for_plain_dicts(self):
        rate_limit = decode_headers({"x-ratelimit-remaining": "7", "X-POLL-INTERVAL": "2"})

        self.assertEqual(rate_limit.remaining, 7)
        self.assertEqual(rate_limit.poll_interval, 2.0)

    def test_accepts_requests_case_insensitive_dict(self):
        headers = CaseInsensitiveDict({"x-ratelimit-limit": "5000"})

        self.assertEqual(decode_headers(headers).limit, 5000)

    def test_integer_values_accept_sign(self):
        rate_limit = decode_headers({"X-Ratelimit-Used": "-0", "X-Ratelimit-Limit": "+60"})

        self.assertEqual(rate_limit.used, 0)
        self.assertEqual(rate_limit.limit, 60)

    def test_integer_values_reject_whitespace_and_non_ascii_digits(self):
        for raw in (" 42", "42 ", "42\n", "\u0663", "1_000"):
            with self.subTest(raw=raw), self.assertRaises(HeaderDecodeError):
                decode_headers({"X-Ratelimit-Remaining": raw})

    def test_overlong_integer_raises_header_decode_error(self):
        with self.assertRaises(HeaderDecodeError):
            decode_headers({"X-Ratelimit-Limit": "9" * 5000})

    def test_malformed_integer_raises_header_decode_error(self):
        with self.assertRaises(HeaderDecodeError) as ctx:
            decode_headers({"X-Ratelimit-Limit": "sixty"})

        self.assertEqual(ctx.exception.header, "X-Ratelimit-Limit")
        self.assertEqual(ctx.exception.value, "sixty")
        self.assertIn("X-Ratelimit-Limit", str(ctx.exception))

    def test_malformed_duration_raises_header_decode_error(self):
        with self.assertRaises(HeaderDecodeError):
            decode_headers({"X-Poll-Interval": "1.5s"})

    def test_negative_timestamp_raises_header_decode_error(self):
        with self.assertRaises(HeaderDecodeError) as ctx:
            decode_headers({"X-Ratelimit-Reset": "-1"})

        self.assertIn("negative", str(ctx.exception))

    def test_record_is_immutable(self):
        rate_limit = decode_headers({})

        with self.assertRaises(dataclasses.FrozenInstanceError):
            rate_limit.x_ratelimit_remaining = 10  # type: ignore[misc]

    def test_seconds_until_reset_is_clamped_at_zero(self):
        rate_limit = RateLimitHeaders(x_ratelimit_reset=datetime.fromtimestamp(1000, tz=UTC))

        self.assertEqual(rate_limit.seconds_until_reset(990.0), 10.0)
        self.assertEqual(rate_limit.seconds_until_reset(1010.0), 0.0)


class TestParseTimestampHeader:
    """Tests for parse_timestamp_header()."""

    def test_empty_value_means_now(self):
        assert parse_timestamp_header("X-Reset", "", clock=lambda: 50.0) == datetime.fromtimestamp(50, tz=UTC)

    def test_zero_is_the_epoch(self):
        assert parse_timestamp_header("X-Reset", "0") == datetime.fromtimestamp(0, tz=UTC)

    @pytest.mark.parametrize("raw", ["300000000000", "99999999999999999999"])
    def test_out_of_range_value_raises_header_decode_error(self, raw):
        with pytest.raises(HeaderDecodeError, match="out of range") as exc_info:
            parse_timestamp_header("X-Ratelimit-Reset", raw)

        assert exc_info.value.header == "X-Ratelimit-Reset"
        assert exc_info.value.value == raw

    def test_out_of_range_reset_is_reported_by_decode_headers(self):
        with pytest.raises(HeaderDecodeError):
            decode_headers({"X-Ratelimit-Reset": "300000000000"})


# =============================================================================
# Custom Header Records Tests
# =============================================================================


@dataclass(frozen=True)
class PollOnlyHeaders:
    XPollInterval: float = field(default=0.0, metadata={"kind": HeaderKind.DURATION})
    XRatelimitResource: str = field(default="", metadata={"kind": HeaderKind.STRING})


@dataclass(frozen=True)
class ExplicitNameHeaders:
    etag: str = field(default="", metadata={"kind": HeaderKind.STRING, "header": "ETag"})


@dataclass(frozen=True)
class MissingKindHeaders:
    x_poll_interval: float = 0.0


@dataclass(frozen=True)
class UnknownKindHeaders:
    x_ratelimit_limit: float = field(default=0.0, metadata={"kind": "float"})


class TestCustomHeaderRecords(unittest.TestCase):
    """Tests for decoding into user-declared header records."""

    def test_camel_case_fields_are_decoded(self):
        headers = {"X-Poll-Interval": "30", "X-Ratelimit-Resource": "search"}

        record = decode_headers(headers, PollOnlyHeaders)

        self.assertIsInstance(record, PollOnlyHeaders)
        self.assertEqual(record.XPollInterval, 30.0)
        self.assertEqual(record.XRatelimitResource, "search")

    def test_explicit_header_name_overrides_derived_one(self):
        record = decode_headers({"ETag": '"abc123"'}, ExplicitNameHeaders)

        self.assertEqual(record.etag, '"abc123"')

    def test_schema_lists_wire_names(self):
        schema = build_header_schema(RateLimitHeaders)

        self.assertEqual(
            [f.header for f in schema],
            [
                "X-Poll-Interval",
                "X-Ratelimit-Limit",
                "X-Ratelimit-Remaining",
                "X-Ratelimit-Used",
                "X-Ratelimit-Reset",
                "X-Ratelimit-Resource",
            ],
        )

    def test_field_without_kind_is_unsupported(self):
        with self.assertRaises(UnsupportedHeaderKindError) as ctx:
            decode_headers({}, MissingKindHeaders)

        self.assertEqual(ctx.exception.field_name, "x_poll_interval")
        self.assertIsNone(ctx.exception.kind)

    def test_unknown_kind_is_unsupported(self):
        with self.assertRaises(UnsupportedHeaderKindError) as ctx:
            build_header_schema(UnknownKindHeaders)

        self.assertIn("UnknownKindHeaders.x_ratelimit_limit", str(ctx.exception))

    def test_unsupported_kind_is_a_header_decode_error(self):
        self.assertTrue(issubclass(UnsupportedHeaderKindError, HeaderDecodeError))

    def test_non_dataclass_is_rejected(self):
        with self.assertRaises(TypeError):
            build_header_schema(dict)


if __name__ == "__main__":
    unittest.main()
