"""
Command-line entrypoint: `github-activity USERNAME`.

Fetches the user's recent public events and prints a short digest.
Exits with status 0 on success, 1 on any error, 2 on usage errors and
130 when interrupted.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ghactivity._client import ClientOptions, RateLimitedClient
from ghactivity._config import GHA
from ghactivity._context import RequestContext
from ghactivity._digest import build_digest, print_digest
from ghactivity._errors import GitHubActivityError, UserNotFoundError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="github-activity",
        description="Summarize a GitHub user's recent public activity.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  github-activity octocat
  github-activity octocat --timeout 60 -v
  GHA_CLIENT_BASE_URL=https://github.example.com/api/v3 github-activity octocat
        """,
    )
    parser.add_argument("username", help="GitHub login whose activity to summarize")
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help=f"API base address (default: {GHA.config.client.base_url})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds, pacing waits included (default: no limit)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else GHA.config.cli.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the command and return its exit status.

    Args:
        argv: Arguments without the program name. None means sys.argv[1:].
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    if args.timeout is not None and args.timeout <= 0:
        print("error: --timeout must be greater than 0", file=sys.stderr)
        return EXIT_FAILURE

    client = RateLimitedClient(
        base_url=args.base_url,
        options=ClientOptions(),
    )
    ctx = RequestContext(timeout=args.timeout)

    try:
        events = client.get_user_events(ctx, args.username)
        digest = build_digest(events)
    except UserNotFoundError as e:
        logger.debug(f"Lookup failed: {e}")
        print(f"User '{e.user}' not found", file=sys.stderr)
        return EXIT_FAILURE
    except GitHubActivityError as e:
        logger.debug(f"❌ {type(e).__name__}: {e}", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        ctx.cancel()
        return EXIT_INTERRUPTED

    print_digest(digest)
    return EXIT_OK


def run() -> None:
    """Console-script entrypoint."""
    sys.exit(main())
