"""
Deck store: owns the deck collection and its persistence.

Every mutation rewrites the deck list to storage and then notifies listeners.
Operations that target an unknown deck or card id are silent no-ops: the id
most likely disappeared through another edit, which is not a bug.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from deckster.application.id_service import generate_card_id, generate_deck_id
from deckster.application.storage import StorageService
from deckster.domain.constants import DECKS_KEY, MAX_DIFFICULTY, MIN_DIFFICULTY
from deckster.domain.errors import NotFoundError, ValidationError
from deckster.domain.models import Card, Deck, EntityId, same_id

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: str, what: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{what} cannot be empty")
    return text


class DeckStore:
    def __init__(
        self,
        storage: StorageService,
        clock: Callable[[], datetime] | None = None,
    ):
        self.storage = storage
        self._clock = clock or _utcnow
        self._listeners: list[Listener] = []
        self._decks: list[Deck] = self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> list[Deck]:
        raw = self.storage.load(DECKS_KEY, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring deck list of type {type(raw).__name__}")
            return []

        decks: list[Deck] = []
        for item in raw:
            try:
                decks.append(Deck.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(f"Skipping unreadable deck record: {e}")
        logger.debug(f"Loaded {len(decks)} decks")
        return decks

    def save(self) -> bool:
        return self.storage.save(DECKS_KEY, [deck.to_record() for deck in self._decks])

    def _commit(self, decks: list[Deck]) -> None:
        self._decks = decks
        self.save()
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener after every deck-list mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _index_of(self, deck_id: EntityId) -> int:
        for i, deck in enumerate(self._decks):
            if same_id(deck.id, deck_id):
                return i
        raise NotFoundError("deck", deck_id)

    def list_decks(self) -> list[Deck]:
        return [deck.model_copy(deep=True) for deck in self._decks]

    def get_deck(self, deck_id: EntityId) -> Deck | None:
        try:
            return self._decks[self._index_of(deck_id)].model_copy(deep=True)
        except NotFoundError:
            return None

    def has_deck(self, deck_id: EntityId) -> bool:
        return any(same_id(deck.id, deck_id) for deck in self._decks)

    # ------------------------------------------------------------------
    # Deck mutations
    # ------------------------------------------------------------------

    def create_deck(self, name: str) -> Deck:
        deck = Deck(id=generate_deck_id(), name=_require_text(name, "Deck name"))
        self._commit([*self._decks, deck])
        logger.info(f"Created deck {deck.name!r} ({deck.id})")
        return deck.model_copy(deep=True)

    def import_deck(self, name: str, rows: Iterable[tuple[str, str]]) -> Deck:
        """
        Create a deck from already-parsed (front, back) rows.

        Rows whose front or back is blank are skipped.

        Raises:
            ValidationError: if the name is blank or no usable row remains.
        """
        deck_name = _require_text(name, "Deck name")
        cards: list[Card] = []
        for front, back in rows:
            front, back = (front or "").strip(), (back or "").strip()
            if not front or not back:
                logger.debug(f"Skipping incomplete import row: {front!r}/{back!r}")
                continue
            cards.append(Card(id=generate_card_id(), front=front, back=back))

        if not cards:
            raise ValidationError("No cards to import")

        deck = Deck(id=generate_deck_id(), name=deck_name, cards=cards)
        self._commit([*self._decks, deck])
        logger.info(f"Imported deck {deck.name!r} with {len(cards)} cards")
        return deck.model_copy(deep=True)

    def delete_deck(self, deck_id: EntityId) -> bool:
        try:
            idx = self._index_of(deck_id)
        except NotFoundError as e:
            logger.debug(f"delete_deck ignored: {e}")
            return False

        removed = self._decks[idx]
        self._commit(self._decks[:idx] + self._decks[idx + 1 :])
        logger.info(f"Deleted deck {removed.name!r} ({removed.id})")
        return True

    def update_deck(self, deck: Deck) -> bool:
        """Replace the stored deck that has the same id. No-op if there is none."""
        try:
            idx = self._index_of(deck.id)
        except NotFoundError as e:
            logger.debug(f"update_deck ignored: {e}")
            return False

        decks = list(self._decks)
        decks[idx] = deck.model_copy(deep=True)
        self._commit(decks)
        return True

    def rename_deck(self, deck_id: EntityId, name: str) -> bool:
        new_name = _require_text(name, "Deck name")
        deck = self.get_deck(deck_id)
        if deck is None:
            logger.debug(f"rename_deck ignored: deck {deck_id!r} not found")
            return False
        deck.name = new_name
        return self.update_deck(deck)

    # ------------------------------------------------------------------
    # Card mutations
    # ------------------------------------------------------------------

    def add_card(self, deck_id: EntityId, front: str, back: str) -> Card | None:
        card = Card(
            id=generate_card_id(),
            front=_require_text(front, "Card front"),
            back=_require_text(back, "Card back"),
        )
        deck = self.get_deck(deck_id)
        if deck is None:
            logger.debug(f"add_card ignored: deck {deck_id!r} not found")
            return None

        deck.cards.append(card)
        self.update_deck(deck)
        return card.model_copy(deep=True)

    def update_card(
        self,
        deck_id: EntityId,
        card_id: EntityId,
        front: str | None = None,
        back: str | None = None,
    ) -> Card | None:
        """Edit the text of a card in place; id, difficulty and lastReviewed are kept."""
        new_front = _require_text(front, "Card front") if front is not None else None
        new_back = _require_text(back, "Card back") if back is not None else None

        deck = self.get_deck(deck_id)
        card = deck.find_card(card_id) if deck else None
        if deck is None or card is None:
            logger.debug(f"update_card ignored: {deck_id!r}/{card_id!r} not found")
            return None

        if new_front is not None:
            card.front = new_front
        if new_back is not None:
            card.back = new_back
        self.update_deck(deck)
        return card.model_copy(deep=True)

    def delete_card(self, deck_id: EntityId, card_id: EntityId) -> bool:
        deck = self.get_deck(deck_id)
        if deck is None or deck.find_card(card_id) is None:
            logger.debug(f"delete_card ignored: {deck_id!r}/{card_id!r} not found")
            return False

        deck.cards = [card for card in deck.cards if not same_id(card.id, card_id)]
        return self.update_deck(deck)

    def record_review(
        self, deck_id: EntityId, card_id: EntityId, difficulty: int
    ) -> Card | None:
        """Stamp a card with its new difficulty and the review time."""
        if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
            raise ValidationError(
                f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
            )

        deck = self.get_deck(deck_id)
        card = deck.find_card(card_id) if deck else None
        if deck is None or card is None:
            logger.debug(f"record_review ignored: {deck_id!r}/{card_id!r} not found")
            return None

        card.difficulty = difficulty
        card.last_reviewed = self._clock()
        self.update_deck(deck)
        return card.model_copy(deep=True)
