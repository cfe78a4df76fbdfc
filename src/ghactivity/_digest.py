"""
Activity digest: what a user has been up to, in a few lines of text.

The digest scans events in feed order (newest first) and only looks inside the
payload of the event types it knows about:

    - PushEvent: commits pushed, per repository.
    - IssuesEvent: the most recent repository where the user opened an issue.
    - WatchEvent: the most recently starred repository.

Every other event type is skipped without inspecting its payload.

Example:
    >>> digest = build_digest(client.get_user_events(ctx, "octocat"))
    >>> print_digest(digest)
    Pushed 3 commits to octocat/Hello-World
    Starred octocat/Spoon-Knife
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from ghactivity._errors import GitHubActivityError
from ghactivity._models import Event

PUSH_EVENT = "PushEvent"
ISSUES_EVENT = "IssuesEvent"
WATCH_EVENT = "WatchEvent"


class PayloadDecodeError(GitHubActivityError):
    """
    Raised when the payload of a recognized event type has an unexpected shape.

    Attributes:
        event_id: ID of the offending event.
        event_type: Its type tag.
    """

    def __init__(self, message: str, event_id: str, event_type: str):
        self.event_id = event_id
        self.event_type = event_type
        super().__init__(f"{event_type} {event_id}: {message}")


def _payload_object(event: Event) -> dict[str, Any]:
    if not isinstance(event.payload, dict):
        raise PayloadDecodeError("payload is not a JSON object", event.id, event.type)
    return event.payload


@dataclass(frozen=True)
class PushPayload:
    """Typed view of a PushEvent payload."""

    size: int

    @classmethod
    def from_event(cls, event: Event) -> PushPayload:
        payload = _payload_object(event)
        if "size" not in payload:
            raise PayloadDecodeError('no field "size" inside payload', event.id, event.type)
        size = payload["size"]
        if isinstance(size, bool) or not isinstance(size, int):
            raise PayloadDecodeError('field "size" is not an int', event.id, event.type)
        return cls(size=size)


@dataclass(frozen=True)
class IssuesPayload:
    """Typed view of an IssuesEvent payload."""

    action: str

    @classmethod
    def from_event(cls, event: Event) -> IssuesPayload:
        payload = _payload_object(event)
        if "action" not in payload:
            raise PayloadDecodeError('no field "action" inside payload', event.id, event.type)
        action = payload["action"]
        if not isinstance(action, str):
            raise PayloadDecodeError('field "action" is not a string', event.id, event.type)
        return cls(action=action)


@dataclass
class EventsDigest:
    """
    Summary of a user's recent activity.

    Attributes:
        commits_pushed: Repository name -> commits pushed, in first-seen order.
        last_issue_opened_repo: Repository of the most recent opened issue, if any.
        last_star: Most recently starred repository, if any.
    """

    commits_pushed: dict[str, int] = field(default_factory=dict)
    last_issue_opened_repo: str | None = None
    last_star: str | None = None

    def is_empty(self) -> bool:
        return not self.commits_pushed and self.last_issue_opened_repo is None and self.last_star is None


def build_digest(events: Iterable[Event]) -> EventsDigest:
    """
    Build a digest from events in feed order (newest first).

    Raises:
        PayloadDecodeError: If a PushEvent or IssuesEvent payload is malformed.
    """
    digest = EventsDigest()

    for event in events:
        if event.type == PUSH_EVENT:
            push = PushPayload.from_event(event)
            digest.commits_pushed[event.repo.name] = digest.commits_pushed.get(event.repo.name, 0) + push.size
        elif event.type == ISSUES_EVENT:
            if digest.last_issue_opened_repo is not None:
                continue
            if IssuesPayload.from_event(event).action == "opened":
                digest.last_issue_opened_repo = event.repo.name
        elif event.type == WATCH_EVENT:
            if digest.last_star is None:
                digest.last_star = event.repo.name

    return digest


def format_digest(digest: EventsDigest) -> list[str]:
    """Render the digest as human-readable lines."""
    if digest.is_empty():
        return ["User has no activity"]

    lines = [f"Pushed {count} commits to {repo}" for repo, count in digest.commits_pushed.items()]
    if digest.last_issue_opened_repo is not None:
        lines.append(f"Opened a new issue in {digest.last_issue_opened_repo}")
    if digest.last_star is not None:
        lines.append(f"Starred {digest.last_star}")
    return lines


def print_digest(digest: EventsDigest, output: Callable[[str], None] = print) -> None:
    """
    Print the digest, one line per call to `output`.

    Args:
        digest: The digest to render.
        output: Callable receiving each line (default: print).
    """
    for line in format_digest(digest):
        output(line)
