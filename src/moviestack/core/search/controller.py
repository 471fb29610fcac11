"""Incremental catalog search: debounce, supersession and result state."""

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Any

from loguru import logger

from moviestack.api import ApiError
from moviestack.config import SEARCH_DEBOUNCE_SECONDS
from moviestack.core.catalog.search import search_movies
from moviestack.core.log.repository import add_entry
from moviestack.feedback import ActionFeedback, failure_message
from moviestack.models.movie import Identity, Movie
from moviestack.protocols import ApiProtocol, CancellableProtocol, SchedulerProtocol


class SearchStatus(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    SETTLED = "settled"
    ERROR = "error"


_RESTING = (SearchStatus.IDLE, SearchStatus.SETTLED, SearchStatus.ERROR)


class SearchController:
    """Search-as-you-type over the movie catalog.

    Every keystroke goes through :meth:`set_query`. A single timer is
    re-armed on each keystroke and only fires after ``delay`` seconds of
    quiet. Each fired search gets a new generation number; a response is
    applied only if its generation is still the current one, so late or
    superseded responses never reach ``results``. Superseded tasks are also
    cancelled, but the worker thread doing the HTTP call may still finish.

    Also owns the "add to log" action of the search page, which needs an
    active identity.
    """

    def __init__(
        self,
        api: ApiProtocol,
        *,
        identity: Identity | None = None,
        feedback: ActionFeedback | None = None,
        scheduler: SchedulerProtocol | None = None,
        delay: float = SEARCH_DEBOUNCE_SECONDS,
        on_change: Callable[["SearchController"], Any] | None = None,
    ) -> None:
        self._api = api
        self.identity = identity
        self.feedback = feedback or ActionFeedback()
        self._scheduler = scheduler
        self.delay = delay
        self._on_change = on_change

        self.query = ""
        self.status = SearchStatus.IDLE
        self.results: tuple[Movie, ...] = ()
        # False until a search has settled, so "no query yet" differs from "no hits".
        self.has_searched = False
        self.error: str | None = None

        self._timer: CancellableProtocol | None = None
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._settled = asyncio.Event()
        self._settled.set()

        self.adding_movie_id: int | None = None
        self._adding: set[int] = set()

    @property
    def loading(self) -> bool:
        return self.status is SearchStatus.SEARCHING

    @property
    def in_flight(self) -> asyncio.Task[None] | None:
        """The task of the current search, if one is running."""
        if self._task is not None and not self._task.done():
            return self._task
        return None

    def _set_status(self, status: SearchStatus) -> None:
        self.status = status
        if status in _RESTING:
            self._settled.set()
        else:
            self._settled.clear()
        if self._on_change is not None:
            self._on_change(self)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _supersede(self) -> None:
        """Make every issued search stale and cancel the running one."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def set_query(self, text: str) -> None:
        """Feed the current input text (call on every keystroke)."""
        self.query = text
        self._cancel_timer()
        # The running search no longer matches what the user typed.
        self._supersede()

        if not text.strip():
            self.results = ()
            self.has_searched = False
            self.error = None
            self._set_status(SearchStatus.IDLE)
            return

        scheduler = self._scheduler or asyncio.get_running_loop()
        self._timer = scheduler.call_later(self.delay, self._fire)
        self._set_status(SearchStatus.DEBOUNCING)

    def _fire(self) -> None:
        self._timer = None
        self._supersede()
        generation = self._generation
        query = self.query.strip()
        self._set_status(SearchStatus.SEARCHING)
        self._task = asyncio.get_running_loop().create_task(self._search(generation, query))

    async def _search(self, generation: int, query: str) -> None:
        logger.debug("Searching {!r} (generation {})", query, generation)
        try:
            movies = await asyncio.to_thread(search_movies, self._api, query)
        except asyncio.CancelledError:
            logger.debug("Search {!r} (generation {}) cancelled", query, generation)
            raise
        except (ApiError, ValueError) as e:
            if generation != self._generation:
                logger.debug("Ignoring failure of stale search {!r}: {}", query, e)
                return
            logger.warning("Search failed for {!r}: {}", query, e)
            # A failed search must not leave older results looking current.
            self.results = ()
            self.error = failure_message(e, "Search failed")
            self._set_status(SearchStatus.ERROR)
            return

        if generation != self._generation:
            logger.debug("Dropping stale results for {!r} (generation {})", query, generation)
            return
        self.results = tuple(movies)
        self.has_searched = True
        self.error = None
        self._set_status(SearchStatus.SETTLED)

    async def wait_settled(self) -> None:
        """Wait until no debounce timer or search is pending."""
        await self._settled.wait()

    def close(self) -> None:
        """Cancel any pending timer and running search."""
        self._cancel_timer()
        self._supersede()
        if self.status not in _RESTING:
            self._set_status(SearchStatus.IDLE)

    def is_adding(self, movie_id: int) -> bool:
        return movie_id in self._adding

    async def add_to_log(self, movie: Movie) -> dict[str, Any]:
        """Add a search hit to the active user's log.

        Without an active identity nothing is sent. A second add of the same
        movie while the first is pending is ignored.
        """
        if self.identity is None:
            error = "No active user selected. Log in as a user before adding movies to your log."
            self.feedback.fail(error)
            return {"success": False, "error": error}
        if movie.id in self._adding:
            return {"success": False, "error": f'"{movie.title}" is already being added.'}

        user_id = self.identity.id
        self._adding.add(movie.id)
        self.adding_movie_id = movie.id
        self.feedback.clear()
        try:
            await asyncio.to_thread(add_entry, self._api, user_id, movie.id)
        except ApiError as e:
            logger.debug("Add to log failed for movie {}: {}", movie.id, e)
            error = failure_message(e, "Failed to add movie to log")
            self.feedback.fail(error)
            return {"success": False, "error": error}
        finally:
            self._adding.discard(movie.id)
            if self.adding_movie_id == movie.id:
                self.adding_movie_id = None

        self.feedback.succeed(f'Saved "{movie.title}" to your log.')
        return {"success": True, "movie_id": movie.id}
