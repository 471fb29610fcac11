"""MovieStack client: catalog search, watch log and user admin."""

from moviestack.api import ApiError, MovieStackApi
from moviestack.feedback import ActionFeedback
from moviestack.identity import IdentityStore
from moviestack.protocols import ApiProtocol, SchedulerProtocol, StorageProtocol
from moviestack.storage import LocalStorage

__all__ = [
    "ActionFeedback",
    "ApiError",
    "ApiProtocol",
    "IdentityStore",
    "LocalStorage",
    "MovieStackApi",
    "SchedulerProtocol",
    "StorageProtocol",
]
