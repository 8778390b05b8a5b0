"""Service for generating stable deck and card ids."""

from ulid import ULID


def generate_deck_id() -> str:
    """Generate a deck id using ULID (millisecond timestamp plus entropy)."""
    return str(ULID())


def generate_card_id() -> str:
    """Generate a card id using ULID."""
    return str(ULID())
