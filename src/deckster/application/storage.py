"""
Storage service: JSON encoding and failure policy on top of a KeyValueStore.

Reads never raise: missing or corrupt values fall back to the caller's default.
Writes never raise either: a failure is logged, reported through the ``False``
return value and remembered in ``last_error`` until ``clear_error`` is called,
while in-memory state stays authoritative.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from deckster.domain.constants import (
    APP_STORAGE_KEYS,
    DECKS_KEY,
    DEFAULT_QUOTA_BYTES,
    NEAR_LIMIT_RATIO,
    STATS_KEY,
)
from deckster.domain.errors import StorageError
from deckster.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)

_PROBE_KEY = "__storage_test__"


class StorageService:
    def __init__(self, store: KeyValueStore, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.store = store
        self.quota_bytes = quota_bytes
        self.last_error: str | None = None

    def save(self, key: str, data: Any) -> bool:
        """Serialize data to JSON and write it under key."""
        try:
            self.store.set_item(key, json.dumps(data))
            return True
        except (StorageError, TypeError, ValueError) as e:
            self.last_error = f"Failed to save data: {e}"
            logger.warning(f"Error saving {key!r}: {e}")
            return False

    def load(self, key: str, default: Any = None) -> Any:
        """Read and decode key, returning default when absent or unreadable."""
        try:
            raw = self.store.get_item(key)
            return json.loads(raw) if raw else default
        except (StorageError, ValueError) as e:
            self.last_error = f"Failed to load data: {e}"
            logger.warning(f"Error loading {key!r}: {e}")
            return default

    def remove(self, key: str) -> bool:
        try:
            self.store.remove_item(key)
            return True
        except StorageError as e:
            self.last_error = f"Failed to clear data: {e}"
            logger.warning(f"Error clearing {key!r}: {e}")
            return False

    def clear(self, key: str | None = None) -> bool:
        """Remove one key, or every application key when key is None."""
        if key:
            return self.remove(key)
        return all([self.remove(k) for k in APP_STORAGE_KEYS])

    def export_data(self) -> str | None:
        """Return decks and aggregate stats as a pretty-printed JSON document."""
        data = {
            "decks": self.load(DECKS_KEY, []),
            "stats": self.load(STATS_KEY, {}),
            "exportDate": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        try:
            return json.dumps(data, indent=2)
        except (TypeError, ValueError) as e:
            self.last_error = f"Failed to export data: {e}"
            logger.warning(f"Error exporting data: {e}")
            return None

    def import_data(self, text: str) -> bool:
        """
        Restore decks and stats from an exported JSON document.

        Each section is written only when present with the expected type.
        Returns False if the document is not valid JSON or a write fails.
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            self.last_error = f"Failed to import data: {e}"
            logger.warning(f"Error importing data: {e}")
            return False

        if not isinstance(data, dict):
            self.last_error = "Failed to import data: document is not an object"
            return False

        ok = True
        if isinstance(data.get("decks"), list):
            ok = self.save(DECKS_KEY, data["decks"]) and ok
        if isinstance(data.get("stats"), dict) and data["stats"]:
            ok = self.save(STATS_KEY, data["stats"]) and ok
        return ok

    def storage_info(self) -> dict[str, Any]:
        """Approximate usage against the configured quota."""
        try:
            total_size = 0
            item_count = 0
            for key in self.store.keys():
                value = self.store.get_item(key)
                total_size += len(value or "")
                item_count += 1
        except StorageError as e:
            logger.warning(f"Error getting storage info: {e}")
            return {
                "totalSize": 0,
                "itemCount": 0,
                "usedPercentage": 0.0,
                "isNearLimit": False,
            }

        return {
            "totalSize": total_size,
            "itemCount": item_count,
            "usedPercentage": total_size / self.quota_bytes * 100,
            "isNearLimit": total_size > self.quota_bytes * NEAR_LIMIT_RATIO,
        }

    def is_available(self) -> bool:
        try:
            self.store.set_item(_PROBE_KEY, _PROBE_KEY)
            self.store.remove_item(_PROBE_KEY)
            return True
        except StorageError:
            return False

    def clear_error(self) -> None:
        self.last_error = None
