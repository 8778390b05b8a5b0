"""
Session persistence: mirrors study-session state into the key-value store.

A saved session is resumed only for the same deck and only while it is younger
than the staleness window. Anything else is discarded on read.
"""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from pydantic import ValidationError as PydanticValidationError

from deckster.application.storage import StorageService
from deckster.domain.constants import SESSION_KEY, SESSION_TTL_HOURS
from deckster.domain.models import EntityId, SessionState, same_id

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionPersistence:
    def __init__(
        self,
        storage: StorageService,
        ttl_hours: float = SESSION_TTL_HOURS,
        clock: Callable[[], int] | None = None,
    ):
        """
        Args:
            storage: Storage service used for reads and writes.
            ttl_hours: Staleness window; older snapshots are not resumed.
            clock: Returns the current time in epoch milliseconds.
        """
        self.storage = storage
        self.ttl_ms = int(ttl_hours * 60 * 60 * 1000)
        self._clock = clock or _now_ms
        self.ignore_next_load = False

    def save(self, state: SessionState) -> bool:
        """Write state stamped with the current time. Empty sessions are not written."""
        if not state.card_order:
            return False
        record = state.model_copy(update={"timestamp": self._clock()}).to_record()
        return self.storage.save(SESSION_KEY, record)

    def load(self, deck_id: EntityId) -> SessionState | None:
        """
        Return the saved session for deck_id if it can be resumed.

        Returns None while loads are suppressed, when nothing is saved, when the
        snapshot belongs to another deck, or when it is stale or unreadable.
        """
        if self.ignore_next_load:
            logger.debug("Session load suppressed during rebuild")
            return None

        raw = self.storage.load(SESSION_KEY, None)
        if not raw:
            return None

        try:
            state = SessionState.model_validate(raw)
        except (PydanticValidationError, TypeError) as e:
            logger.warning(f"Discarding unreadable saved session: {e}")
            return None

        if not same_id(state.deck_id, deck_id):
            logger.debug(f"Saved session is for deck {state.deck_id!r}, not {deck_id!r}")
            return None

        age = self._clock() - state.timestamp
        if age >= self.ttl_ms:
            logger.info(f"Discarding stale session for deck {deck_id!r}")
            self.clear()
            return None

        return state

    def clear(self) -> bool:
        return self.storage.remove(SESSION_KEY)

    @contextmanager
    def suppress_loads(self) -> Iterator[None]:
        """Ignore load attempts until the enclosed rebuild has completed."""
        self.ignore_next_load = True
        try:
            yield
        finally:
            self.ignore_next_load = False
