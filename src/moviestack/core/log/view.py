"""Cached view of one user's watch log."""

import asyncio
from typing import Any

from loguru import logger

from moviestack.api import ApiError
from moviestack.core.log.repository import add_entry, delete_entry, fetch_log, partition_entries
from moviestack.feedback import ActionFeedback, failure_message
from moviestack.models.movie import Identity, LogEntry
from moviestack.protocols import ApiProtocol

_NO_USER = "No active user selected. Log in as a user to manage a movie log."


class LogView:
    """Read-through cache of the bound user's log.

    Entries are removed locally only after the server confirms a delete.
    Switching users drops the cache wholesale.
    """

    def __init__(
        self,
        api: ApiProtocol,
        identity: Identity | None = None,
        *,
        feedback: ActionFeedback | None = None,
    ) -> None:
        self._api = api
        self.identity = identity
        self.feedback = feedback or ActionFeedback()
        self.entries: list[LogEntry] = []
        self.loading = False

        # Most recently started delete still waiting on the server.
        self.deleting_log_id: int | None = None
        self._deleting: set[int] = set()

    @property
    def ranked(self) -> list[LogEntry]:
        return partition_entries(self.entries)[0]

    @property
    def unranked(self) -> list[LogEntry]:
        return partition_entries(self.entries)[1]

    def is_deleting(self, log_id: int) -> bool:
        return log_id in self._deleting

    async def load(self) -> bool:
        """Replace the cache with the server's copy of the log.

        Returns:
            True if the log was fetched. On failure the cache is left as is.
        """
        identity = self.identity
        if identity is None:
            self.entries = []
            return False

        self.loading = True
        try:
            entries = await asyncio.to_thread(fetch_log, self._api, identity.id)
        except (ApiError, ValueError) as e:
            logger.debug("Loading log for user {} failed: {}", identity.id, e)
            self.feedback.fail(failure_message(e, "Failed to load movie log"))
            return False
        finally:
            self.loading = False

        if self.identity != identity:
            # User switched while the fetch was running.
            return False
        self.entries = entries
        return True

    async def switch_user(self, identity: Identity | None) -> bool:
        """Bind another user, dropping everything cached for the previous one."""
        self.identity = identity
        self.entries = []
        self._deleting.clear()
        self.deleting_log_id = None
        return await self.load()

    def _find(self, log_id: int) -> LogEntry | None:
        return next((e for e in self.entries if e.log_id == log_id), None)

    async def delete(self, log_id: int) -> dict[str, Any]:
        """Delete one entry, removing it from the cache once the server agrees."""
        identity = self.identity
        if identity is None:
            self.feedback.fail(_NO_USER)
            return {"success": False, "error": _NO_USER}
        if log_id in self._deleting:
            return {"success": False, "error": f"Log entry {log_id} is already being deleted."}

        entry = self._find(log_id)
        title = entry.title if entry and entry.title else f"entry {log_id}"

        self._deleting.add(log_id)
        self.deleting_log_id = log_id
        self.feedback.clear()
        try:
            await asyncio.to_thread(delete_entry, self._api, identity.id, log_id)
        except ApiError as e:
            logger.debug("Deleting log entry {} failed: {}", log_id, e)
            error = failure_message(e, "Failed to delete log entry")
            self.feedback.fail(error)
            return {"success": False, "error": error}
        finally:
            self._deleting.discard(log_id)
            if self.deleting_log_id == log_id:
                self.deleting_log_id = None

        if self.identity == identity:
            self.entries = [e for e in self.entries if e.log_id != log_id]
        self.feedback.succeed(f'Deleted "{title}" from your log.')
        return {"success": True, "log_id": log_id}

    async def add(self, movie_id: int, *, watched_on: str | None = None, note: str | None = None) -> dict[str, Any]:
        """Add a movie to the bound user's log, then reload it."""
        identity = self.identity
        if identity is None:
            self.feedback.fail(_NO_USER)
            return {"success": False, "error": _NO_USER}

        self.feedback.clear()
        try:
            entry = await asyncio.to_thread(
                add_entry, self._api, identity.id, movie_id, watched_on=watched_on, note=note
            )
        except ApiError as e:
            logger.debug("Adding movie {} to log failed: {}", movie_id, e)
            error = failure_message(e, "Failed to add movie to log")
            self.feedback.fail(error)
            return {"success": False, "error": error}

        await self.load()
        # Title comes from the refreshed log; the add response does not carry it.
        added = next((e for e in self.entries if e.movie_id == movie_id), entry)
        label = added.title if added and added.title else f"movie {movie_id}"
        self.feedback.succeed(f'Saved "{label}" to your log.')
        output: dict[str, Any] = {"success": True, "movie_id": movie_id}
        if added is not None:
            output["log_id"] = added.log_id
        return output
