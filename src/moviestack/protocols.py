"""Protocols for dependency injection in the MovieStack client."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ApiProtocol(Protocol):
    """Protocol for MovieStack API clients."""

    def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Invoke an API endpoint and return the decoded JSON body (or None)."""
        ...


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol for the local key/value store holding client state."""

    def get_item(self, key: str) -> str | None:
        """Return the stored string, or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a string under key, replacing any prior value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        ...


class CancellableProtocol(Protocol):
    """A scheduled callback that can be cancelled before it runs."""

    def cancel(self) -> None: ...


@runtime_checkable
class SchedulerProtocol(Protocol):
    """Deferred-call scheduler. A running asyncio loop satisfies it."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> CancellableProtocol:
        """Run callback after delay seconds, unless cancelled first."""
        ...
