"""Catalog search against the MovieStack service."""

from loguru import logger

from moviestack.models.movie import Movie
from moviestack.protocols import ApiProtocol


def search_movies(api: ApiProtocol, query: str) -> list[Movie]:
    """Search the catalog by title.

    Results keep the server's order; nothing is re-ranked client-side.

    Args:
        api: MovieStack API client.
        query: Search text, sent as-is apart from trimming.
    """
    query = query.strip()
    if not query:
        return []

    data = api.call("GET", "/api/movies/search", params={"q": query})
    if not isinstance(data, list):
        msg = f"bad search response: expected a list, got {type(data).__name__}"
        raise ValueError(msg)

    movies = [Movie.from_api(row) for row in data]
    logger.debug("Search {!r} returned {} movies", query, len(movies))
    return movies
