"""
Ports (interfaces) for persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator


class KeyValueStore(ABC):
    """
    Port for a synchronous string key-value store, shaped like browser local storage.

    Implementations:
        - InMemoryStore: Process-local dict, used for tests and throwaway runs.
        - JsonFileStore: One JSON document on disk.

    Implementations raise StorageError when a read or write cannot be completed.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the raw value for key, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing a missing key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over all stored keys."""
        pass
