"""Watch-log operations against the MovieStack API."""

from loguru import logger

from moviestack.models.movie import LogEntry
from moviestack.protocols import ApiProtocol


def _log_path(user_id: int) -> str:
    return f"/api/users/{user_id}/log"


def fetch_log(api: ApiProtocol, user_id: int) -> list[LogEntry]:
    """Fetch the whole log of a user, in server order."""
    data = api.call("GET", _log_path(user_id))
    if not isinstance(data, list):
        msg = f"bad log response: expected a list, got {type(data).__name__}"
        raise ValueError(msg)
    entries = [LogEntry.from_api(row) for row in data]
    logger.debug("Fetched {} log entries for user {}", len(entries), user_id)
    return entries


def add_entry(
    api: ApiProtocol,
    user_id: int,
    movie_id: int,
    *,
    watched_on: str | None = None,
    note: str | None = None,
) -> LogEntry | None:
    """Add a movie to a user's log (the server upserts on user + movie).

    Args:
        api: MovieStack API client.
        user_id: Owner of the log.
        movie_id: Catalog id of the movie.
        watched_on: Optional ``YYYY-MM-DD`` date; the server defaults to today.
        note: Optional free-text note.

    Returns:
        The created entry when the server echoes a parseable one, else None.
    """
    payload: dict[str, object] = {"movie_id": movie_id}
    if watched_on is not None and watched_on.strip():
        payload["watched_on"] = watched_on.strip()
    if note is not None and note.strip():
        payload["note"] = note.strip()

    data = api.call("POST", _log_path(user_id), payload=payload)
    if not isinstance(data, dict):
        return None
    try:
        return LogEntry.from_api(data)
    except ValueError:
        logger.debug("Add-to-log response not parseable as an entry: {!r}", data)
        return None


def delete_entry(api: ApiProtocol, user_id: int, log_id: int) -> None:
    """Remove one entry from a user's log."""
    api.call("DELETE", f"{_log_path(user_id)}/{log_id}")


def partition_entries(entries: list[LogEntry]) -> tuple[list[LogEntry], list[LogEntry]]:
    """Split entries into (ranked, unranked).

    Ranked entries are ordered by ``rank_position`` (stable, so ties keep
    server order); unranked entries keep server order.
    """
    ranked = sorted((e for e in entries if e.rank_position is not None), key=lambda e: e.rank_position or 0)
    unranked = [e for e in entries if e.rank_position is None]
    return ranked, unranked
