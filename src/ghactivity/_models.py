"""
Data models for the GitHub events feed.

An Event is a tagged union: `type` is decoded eagerly, while `payload` is kept
exactly as it came off the wire (the decoded JSON value, untouched). Only a
consumer that recognizes the tag interprets the payload, see
`ghactivity._digest`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ghactivity._errors import BodyDecodeError


def _require(data: dict[str, Any], key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if key not in data:
        raise BodyDecodeError(f"{where}: missing required field '{key}'")
    return _check(data[key], key, expected, where)


def _optional(data: dict[str, Any], key: str, expected: type | tuple[type, ...], where: str, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    return _check(value, key, expected, where)


def _check(value: Any, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    # bool is an int subclass; JSON true/false is never a valid id
    if isinstance(value, bool) and expected is int:
        raise BodyDecodeError(f"{where}: field '{key}' must be an integer, got {value!r}")
    if not isinstance(value, expected):
        raise BodyDecodeError(f"{where}: field '{key}' has unexpected type {type(value).__name__}")
    return value


def _as_object(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise BodyDecodeError(f"{where}: expected a JSON object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Actor:
    """The user that triggered an event."""

    id: int
    login: str
    display_login: str = ""
    gravatar_id: str = ""
    url: str = ""
    avatar_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Actor:
        obj = _as_object(data, "actor")
        return cls(
            id=_require(obj, "id", int, "actor"),
            login=_require(obj, "login", str, "actor"),
            display_login=_optional(obj, "display_login", str, "actor", ""),
            gravatar_id=_optional(obj, "gravatar_id", str, "actor", ""),
            url=_optional(obj, "url", str, "actor", ""),
            avatar_url=_optional(obj, "avatar_url", str, "actor", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "login": self.login,
            "display_login": self.display_login,
            "gravatar_id": self.gravatar_id,
            "url": self.url,
            "avatar_url": self.avatar_url,
        }


@dataclass(frozen=True)
class Repo:
    """The repository an event happened in."""

    id: int
    name: str
    url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Repo:
        obj = _as_object(data, "repo")
        return cls(
            id=_require(obj, "id", int, "repo"),
            name=_require(obj, "name", str, "repo"),
            url=_optional(obj, "url", str, "repo", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}


@dataclass(frozen=True)
class Organisation:
    """The organisation owning the repository, when there is one."""

    id: int
    login: str
    gravatar_id: str = ""
    url: str = ""
    avatar_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Organisation:
        obj = _as_object(data, "org")
        return cls(
            id=_require(obj, "id", int, "org"),
            login=_require(obj, "login", str, "org"),
            gravatar_id=_optional(obj, "gravatar_id", str, "org", ""),
            url=_optional(obj, "url", str, "org", ""),
            avatar_url=_optional(obj, "avatar_url", str, "org", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "login": self.login,
            "gravatar_id": self.gravatar_id,
            "url": self.url,
            "avatar_url": self.avatar_url,
        }


@dataclass(frozen=True)
class Event:
    """
    One entry of a user's public activity feed.

    Attributes:
        id: Event ID (a numeric string).
        type: Type tag, e.g. "PushEvent", "IssuesEvent", "WatchEvent".
        actor: Who triggered the event.
        repo: Where it happened.
        payload: Type-specific payload, kept undecoded (the raw JSON value).
        public: Whether the event is public.
        created_at: ISO-8601 creation time, as sent by the server.
        org: Owning organisation, if any.

    Example:
        >>> event = Event.from_dict(raw)
        >>> if event.type == "PushEvent":
        ...     print(event.payload["size"])
    """

    id: str
    type: str
    actor: Actor
    repo: Repo
    payload: Any = None
    public: bool = False
    created_at: str = ""
    org: Organisation | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Event:
        """
        Build an Event from a decoded JSON object.

        Raises:
            BodyDecodeError: If required fields are missing or mistyped.
        """
        obj = _as_object(data, "event")
        org = obj.get("org")
        return cls(
            id=_require(obj, "id", str, "event"),
            type=_require(obj, "type", str, "event"),
            actor=Actor.from_dict(_require(obj, "actor", dict, "event")),
            repo=Repo.from_dict(_require(obj, "repo", dict, "event")),
            payload=obj.get("payload"),
            public=_optional(obj, "public", bool, "event", False),
            created_at=_optional(obj, "created_at", str, "event", ""),
            org=Organisation.from_dict(org) if org is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the wire shape. `org` is omitted when absent."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "actor": self.actor.to_dict(),
            "repo": self.repo.to_dict(),
            "payload": self.payload,
            "public": self.public,
            "created_at": self.created_at,
        }
        if self.org is not None:
            data["org"] = self.org.to_dict()
        return data

    @property
    def created_at_datetime(self) -> datetime | None:
        """`created_at` parsed as an aware UTC datetime, or None if empty or unparseable."""
        if not self.created_at:
            return None
        try:
            parsed = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
