"""Persistence of the active user ("login as" without authentication)."""

import json

from loguru import logger

from moviestack.config import ACTIVE_USER_KEY
from moviestack.models.movie import Identity
from moviestack.protocols import StorageProtocol


class IdentityStore:
    """Single persisted slot holding the active :class:`Identity`."""

    def __init__(self, storage: StorageProtocol, *, key: str = ACTIVE_USER_KEY) -> None:
        self._storage = storage
        self.key = key

    def load(self) -> Identity | None:
        """Return the stored identity, or None.

        Anything that does not decode to ``{"id": int, "username": str}`` is
        purged from storage and reported as absent.
        """
        raw = self._storage.get_item(self.key)
        if raw is None:
            return None
        try:
            return Identity.from_dict(json.loads(raw))
        except ValueError as e:
            logger.debug("Discarding malformed active user {!r}: {}", raw[:64], e)
            self._storage.remove_item(self.key)
            return None

    def save(self, identity: Identity) -> None:
        self._storage.set_item(self.key, json.dumps(identity.to_dict()))
        logger.debug("Active user set to {} (ID: {})", identity.username, identity.id)

    def clear(self) -> None:
        self._storage.remove_item(self.key)
