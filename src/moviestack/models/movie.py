"""Domain models for the MovieStack client."""

from dataclasses import dataclass
from typing import Any


def _require(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    # bool is an int subclass, but never a valid id
    if isinstance(value, bool) or not isinstance(value, kind):
        msg = f"bad {key!r} field: {value!r}"
        raise ValueError(msg)
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _number(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"bad {key!r} field: {value!r}"
        raise ValueError(msg)
    return float(value)


def _object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        msg = f"{what} must be an object, got {type(data).__name__}"
        raise ValueError(msg)
    return data


@dataclass(frozen=True)
class Identity:
    """The active user the client acts as."""

    id: int
    username: str

    @classmethod
    def from_dict(cls, data: Any) -> "Identity":
        """Build from a decoded ``{"id", "username"}`` object, raising ValueError on mismatch."""
        data = _object(data, "identity")
        return cls(id=_require(data, "id", int), username=_require(data, "username", str))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username}


@dataclass(frozen=True)
class Movie:
    """A catalog search hit."""

    id: int
    title: str
    is_adult: bool = False
    is_video: bool = False
    popularity: float = 0.0
    score: float = 0.0

    @classmethod
    def from_api(cls, data: Any) -> "Movie":
        data = _object(data, "movie")
        return cls(
            id=_require(data, "id", int),
            title=_require(data, "original_title", str),
            is_adult=bool(data.get("adult", False)),
            is_video=bool(data.get("video", False)),
            popularity=_number(data, "popularity"),
            score=_number(data, "score"),
        )


@dataclass(frozen=True)
class LogEntry:
    """One movie in a user's watch log.

    ``rank_position`` is None for unranked entries, a positive integer otherwise.
    """

    log_id: int
    user_id: int
    movie_id: int
    title: str
    watched_on: str
    note: str | None = None
    rank_position: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_ranked(self) -> bool:
        return self.rank_position is not None

    @classmethod
    def from_api(cls, data: Any) -> "LogEntry":
        data = _object(data, "log entry")
        rank = data.get("rank_position")
        if rank is not None and (isinstance(rank, bool) or not isinstance(rank, int) or rank < 1):
            msg = f"bad 'rank_position' field: {rank!r}"
            raise ValueError(msg)
        return cls(
            log_id=_require(data, "log_id", int),
            user_id=_require(data, "user_id", int),
            movie_id=_require(data, "movie_id", int),
            # The add endpoint echoes the entry without a title.
            title=_optional_str(data, "original_title") or "",
            watched_on=_require(data, "watched_on", str),
            note=_optional_str(data, "note"),
            rank_position=rank,
            created_at=_optional_str(data, "created_at") or "",
            updated_at=_optional_str(data, "updated_at") or "",
        )


@dataclass(frozen=True)
class AdminUser:
    """A user record as listed by the admin endpoints."""

    id: int
    username: str
    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "AdminUser":
        data = _object(data, "user")
        return cls(
            id=_require(data, "id", int),
            username=_require(data, "username", str),
            display_name=_optional_str(data, "display_name"),
            bio=_optional_str(data, "bio"),
            avatar_url=_optional_str(data, "avatar_url"),
            created_at=_optional_str(data, "created_at") or "",
            updated_at=_optional_str(data, "updated_at") or "",
        )

    def identity(self) -> Identity:
        return Identity(id=self.id, username=self.username)
