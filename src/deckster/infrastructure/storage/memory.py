"""
In-memory key-value store.

Implements KeyValueStore with a plain dict. Nothing survives the process.
"""

from collections.abc import Iterator

from deckster.domain.errors import StorageError
from deckster.domain.ports import KeyValueStore


class InMemoryStore(KeyValueStore):
    def __init__(
        self,
        initial: dict[str, str] | None = None,
        quota_bytes: int | None = None,
    ):
        self._items: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self.quota_bytes:
                raise StorageError(f"quota exceeded writing {key!r}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))
