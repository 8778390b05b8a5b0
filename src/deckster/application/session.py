"""
Study session state machine.

A session is EMPTY (no deck, or nothing to study), IN_PROGRESS (cards left) or
COMPLETE (every card answered). Each transition is saved before the method
returns, so a reload resumes exactly where the user left off.
"""

import logging
import random
from enum import Enum

from deckster.application.deck_store import DeckStore
from deckster.application.session_builder import build_study_cards, reshuffle_study_cards
from deckster.application.session_persistence import SessionPersistence
from deckster.application.stats.service import ReviewStatsService
from deckster.application.study_options import StudyOptionsStore
from deckster.domain.constants import MAX_DIFFICULTY, MIN_DIFFICULTY
from deckster.domain.errors import SessionError, ValidationError
from deckster.domain.models import Deck, EntityId, SessionState, SessionStats, StudyCard

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class StudySession:
    """
    Drives one study session at a time for the active deck.

    Collaborators are injected: review outcomes flow into the DeckStore and the
    ReviewStatsService, options are read from the StudyOptionsStore, and state
    is mirrored through SessionPersistence.

    The session subscribes to deck-list changes and drops back to EMPTY when
    its active deck disappears.
    """

    def __init__(
        self,
        decks: DeckStore,
        options: StudyOptionsStore,
        stats: ReviewStatsService,
        persistence: SessionPersistence,
        rng: random.Random | None = None,
    ):
        self.decks = decks
        self.options = options
        self.stats = stats
        self.persistence = persistence
        self._rng = rng
        self.state: SessionState | None = None
        self._unsubscribe = decks.subscribe(self._on_decks_changed)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        if self.state is None or not self.state.card_order:
            return SessionStatus.EMPTY
        if self.state.completed:
            return SessionStatus.COMPLETE
        return SessionStatus.IN_PROGRESS

    @property
    def deck_id(self) -> EntityId | None:
        return self.state.deck_id if self.state else None

    @property
    def card_order(self) -> list[StudyCard]:
        return list(self.state.card_order) if self.state else []

    @property
    def current_index(self) -> int:
        return self.state.current_index if self.state else 0

    @property
    def session_stats(self) -> SessionStats:
        return self.state.session_stats.model_copy() if self.state else SessionStats()

    @property
    def current_card(self) -> StudyCard | None:
        if self.status is not SessionStatus.IN_PROGRESS:
            return None
        return self.state.card_order[self.state.current_index]

    @property
    def progress(self) -> tuple[int, int]:
        """(answered, total) for the current pass."""
        return self.current_index, len(self.card_order)

    @property
    def accuracy(self) -> int:
        return self.session_stats.accuracy

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, deck_id: EntityId) -> SessionStatus:
        """Make deck_id the active deck, resuming its saved session when possible."""
        deck = self.decks.get_deck(deck_id)
        if deck is None:
            logger.info(f"Cannot study deck {deck_id!r}: not found")
            self.state = None
            return self.status

        resumed = self.persistence.load(deck.id)
        if resumed is not None:
            self.state = resumed
            logger.info(
                f"Resumed session for {deck.name!r} at card "
                f"{resumed.current_index + 1}/{len(resumed.card_order)}"
            )
            return self.status

        self._rebuild(deck)
        self._save()
        return self.status

    def submit_review(self, difficulty: int) -> SessionStatus:
        """
        Rate the current card and move on.

        Raises:
            ValidationError: if difficulty is outside 0..3.
            SessionError: if no card is waiting for an answer.
        """
        if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
            raise ValidationError(
                f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
            )
        if self.status is not SessionStatus.IN_PROGRESS:
            raise SessionError(f"Cannot submit a review while session is {self.status.value}")

        state = self.state
        card = state.card_order[state.current_index]

        self.decks.record_review(state.deck_id, card.id, difficulty)
        correct = self.stats.record(difficulty)

        state.session_stats = SessionStats(
            correct=state.session_stats.correct + (1 if correct else 0),
            total=state.session_stats.total + 1,
        )
        state.current_index += 1
        if state.current_index == len(state.card_order):
            state.completed = True
            logger.info(
                f"Session complete: {state.session_stats.correct}/"
                f"{state.session_stats.total} correct"
            )

        self._save()
        return self.status

    def reset_keep_subset(self) -> SessionStatus:
        """
        Study the same subset again in a fresh order ("Review Again").

        Falls back to a full rebuild when there is no subset to replay.
        """
        if self.state is None:
            raise SessionError("No active deck")

        with self.persistence.suppress_loads():
            self.persistence.clear()
            subset = self.state.original_card_order or []
            if subset:
                cards = reshuffle_study_cards(subset, self.options.options, self._rng)
                self.state = SessionState(
                    deck_id=self.state.deck_id,
                    card_order=cards,
                    original_card_order=list(subset),
                )
            else:
                self._rebuild(self.decks.get_deck(self.state.deck_id))
            self._save()
        return self.status

    def reset_new_subset(self) -> SessionStatus:
        """Discard the current subset and build a fresh one from the deck."""
        if self.state is None:
            raise SessionError("No active deck")

        with self.persistence.suppress_loads():
            self.persistence.clear()
            deck = self.decks.get_deck(self.state.deck_id)
            if deck is None:
                self.state = None
            else:
                self._rebuild(deck)
                self._save()
        return self.status

    def close(self) -> None:
        """Stop listening to deck changes."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rebuild(self, deck: Deck | None) -> None:
        if deck is None:
            self.state = None
            return
        cards = build_study_cards(deck, self.options.options, self._rng)
        self.state = SessionState(
            deck_id=deck.id,
            card_order=cards,
            original_card_order=list(cards),
        )
        logger.debug(f"Built {len(cards)} study cards for {deck.name!r}")

    def _save(self) -> None:
        if self.state is not None and self.state.card_order:
            self.persistence.save(self.state)

    def _on_decks_changed(self) -> None:
        if self.state is None or self.decks.has_deck(self.state.deck_id):
            return
        logger.info(f"Active deck {self.state.deck_id!r} was removed; ending session")
        self.persistence.clear()
        self.state = None
