"""
Session builder for study sessions.

Turns a deck plus study options into the ordered list of study cards:
1. Optionally keeping only missed cards (falling back to the whole deck)
2. Resolving which face is shown first, once per card
3. Shuffling, then truncating to the card limit
"""

import logging
import random

from deckster.domain.constants import MISSED_THRESHOLD
from deckster.domain.models import Card, Deck, StudyCard, StudyDirection, StudyOptions

logger = logging.getLogger(__name__)

_default_rng = random.Random()


def build_study_cards(
    deck: Deck | None,
    options: StudyOptions,
    rng: random.Random | None = None,
) -> list[StudyCard]:
    """
    Build the ordered study list for one session.

    Args:
        deck: Deck to study. None or an empty deck yields an empty list.
        options: Study options; read only.
        rng: Source of randomness for direction flips and shuffling.

    Returns:
        New StudyCard objects; the deck and its cards are left untouched.
    """
    if deck is None or not deck.cards:
        return []

    rng = rng or _default_rng
    cards: list[Card] = list(deck.cards)

    if options.only_missed:
        missed = [card for card in cards if card.difficulty < MISSED_THRESHOLD]
        if missed:
            cards = missed
        else:
            logger.debug(f"No missed cards in deck {deck.id!r}; studying all cards")

    study_cards = [
        StudyCard.from_card(card, _resolve_direction(options, rng)) for card in cards
    ]

    # Direction is already attached to each card, so it survives the shuffle.
    if options.random_order:
        rng.shuffle(study_cards)

    if options.card_limit and options.card_limit > 0:
        study_cards = study_cards[: options.card_limit]

    return study_cards


def reshuffle_study_cards(
    cards: list[StudyCard],
    options: StudyOptions,
    rng: random.Random | None = None,
) -> list[StudyCard]:
    """
    Reorder an already-built study list for another pass.

    Only the shuffle step is re-applied: the subset and each card's direction
    stay exactly as they were built.
    """
    reordered = list(cards)
    if options.random_order and len(reordered) > 1:
        (rng or _default_rng).shuffle(reordered)
    return reordered


def _resolve_direction(options: StudyOptions, rng: random.Random) -> StudyDirection:
    if options.direction == "random":
        return "front-to-back" if rng.random() < 0.5 else "back-to-front"
    return options.direction
