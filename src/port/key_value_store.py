from typing import Protocol


class KeyValueStore(Protocol):
    """Protocol for durable string-valued records addressed by key.

    Each call is atomic per key (last writer wins); there are no cross-key
    transactions. Implementations raise StorageError when the medium is
    unavailable or full.
    """
    async def get(self, key: str) -> str | None:
        """Return the stored value or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is a no-op."""
        ...
