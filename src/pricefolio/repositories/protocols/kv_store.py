"""Key-value storage protocol for serialized blobs."""

from typing import Protocol, Optional


class KeyValueStore(Protocol):
    """Durable string key-value store (used to persist the price cache)."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value for key."""
        ...
