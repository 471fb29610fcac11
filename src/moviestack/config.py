"""Configuration constants for the MovieStack client."""

import os
from pathlib import Path

# Base URL of the MovieStack HTTP service.
API_URL: str = os.environ.get("MOVIESTACK_API_URL", "http://localhost:8080").rstrip("/")

# Local key/value store (the client-side equivalent of browser localStorage).
# First existing file is used; if none exists, the first entry is created.
STORAGE_FILES: list[Path] = [
    Path("~/.config/moviestack/storage.json").expanduser(),
    Path("~/.moviestack.json").expanduser(),
]
if os.environ.get("MOVIESTACK_STORAGE"):
    STORAGE_FILES.insert(0, Path(os.environ["MOVIESTACK_STORAGE"]).expanduser())

# Storage key holding the serialized active user.
ACTIVE_USER_KEY: str = "moviestack_active_user"

# Quiet period after the last keystroke before a search is sent.
SEARCH_DEBOUNCE_SECONDS: float = 0.3

REQUEST_TIMEOUT_SECONDS: float = 10


def resolve_storage_path() -> Path:
    """Return the first existing storage file, or the default location."""
    for candidate in STORAGE_FILES:
        if candidate.is_file():
            return candidate
    return STORAGE_FILES[0]
