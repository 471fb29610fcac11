"""MovieStack HTTP API client."""

from typing import Any

import requests
from loguru import logger

from moviestack.config import API_URL, REQUEST_TIMEOUT_SECONDS


class ApiError(RuntimeError):
    """A MovieStack call that did not succeed.

    Covers transport failures (``status`` is None) and non-2xx responses.
    ``server_message`` holds the ``error`` field of a JSON error body, if any.
    """

    def __init__(self, message: str, *, status: int | None = None, server_message: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.server_message = server_message

    def user_message(self, default: str) -> str:
        """Text to show a user: the server's own words when it sent some."""
        return self.server_message or default


def _error_text(response: requests.Response) -> str | None:
    """Pull ``{"error": ...}`` out of a failed response, tolerating junk bodies."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return None


class MovieStackApi:
    """Encapsulated MovieStack API over a shared ``requests.Session``."""

    def __init__(self, *, base_url: str | None = None, timeout: float = REQUEST_TIMEOUT_SECONDS) -> None:
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout
        self.sess = requests.Session()
        logger.debug("API ready: base_url {!r}, timeout {!r}", self.base_url, self.timeout)

    def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Invoke a MovieStack endpoint, return decoded JSON (None for empty bodies)."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("Making request: {} {!r} params={!r}", method, path, params)

        try:
            r = self.sess.request(method, url, params=params, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            msg = f"API call failed: {method} {path!r} -> {e}"
            raise ApiError(msg) from e

        if not r.ok:
            server_message = _error_text(r)
            msg = f"API call failed: {method} {path!r} -> ({r.status_code}, {server_message!r})"
            raise ApiError(msg, status=r.status_code, server_message=server_message)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            msg = f"API call returned invalid JSON: {method} {path!r}"
            raise ApiError(msg, status=r.status_code) from e
