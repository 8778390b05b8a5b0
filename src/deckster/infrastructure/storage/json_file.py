"""
JSON file key-value store: Infrastructure adapter for on-disk persistence.

Implements KeyValueStore by keeping every key in a single JSON object on disk.
The file is read once on first access and rewritten atomically on every
mutation. An unreadable document is moved aside to a .corrupt backup and the
store starts empty, so later writes can replace it.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

from deckster.domain.errors import StorageError
from deckster.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """
    Stores string values in one JSON document.

    Args:
        path: Location of the JSON document. Parent directories are created on write.
        quota_bytes: Optional cap on the total size of stored values.
    """

    def __init__(self, path: Path, quota_bytes: int | None = None):
        self.path = Path(path)
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        if not self.path.exists():
            self._items = {}
            return self._items

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            return self._discard_corrupt(str(e))

        try:
            raw = json.loads(text or "{}")
        except ValueError as e:
            return self._discard_corrupt(str(e))
        if not isinstance(raw, dict):
            return self._discard_corrupt("top level is not an object")

        self._items = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        logger.debug(f"Loaded {len(self._items)} keys from {self.path}")
        return self._items

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.corrupt")

    def _discard_corrupt(self, reason: str) -> dict[str, str]:
        """Move an unreadable document aside and start from an empty store."""
        logger.warning(f"Unreadable storage file {self.path} ({reason}); starting empty")
        try:
            os.replace(self.path, self.backup_path)
            logger.warning(f"Kept the unreadable file as {self.backup_path}")
        except OSError as e:
            logger.warning(f"Could not back up {self.path}: {e}")
        self._items = {}
        return self._items

    def _flush(self, items: dict[str, str]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        if self.quota_bytes is not None:
            used = sum(len(v) for k, v in items.items() if k != key)
            if used + len(value) > self.quota_bytes:
                raise StorageError(f"quota exceeded writing {key!r}")

        updated = {**items, key: value}
        self._flush(updated)
        self._items = updated

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        updated = {k: v for k, v in items.items() if k != key}
        self._flush(updated)
        self._items = updated

    def keys(self) -> Iterator[str]:
        return iter(list(self._load()))
