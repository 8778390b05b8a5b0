"""
Domain models for review statistics.

AggregateStats is persisted; DeckProgress and StatsOverview are derived on
demand and never stored.
"""

from dataclasses import dataclass, field

from deckster.domain.models import Record


class AggregateStats(Record):
    """
    Process-wide review counters, updated by every review in every deck.

    Attributes:
        total_reviews: Number of reviews ever submitted.
        correct: Reviews rated Good or Easy.
        incorrect: Reviews rated Again or Hard.
        streak_count: Consecutive correct reviews; reset by an incorrect one.
    """

    total_reviews: int = 0
    correct: int = 0
    incorrect: int = 0
    streak_count: int = 0


@dataclass(frozen=True)
class DeckProgress:
    """Per-deck card counts."""

    name: str
    total: int
    reviewed: int
    mastered: int
    progress: int  # Rounded percent of cards reviewed at least once


@dataclass
class StatsOverview:
    """Everything the stats view shows, computed from decks plus aggregate counters."""

    total_cards: int
    reviewed_cards: int
    mastered_cards: int
    accuracy: int
    total_reviews: int
    streak_count: int
    correct_share: float | None  # Fraction of reviews answered correctly
    incorrect_share: float | None
    decks: list[DeckProgress] = field(default_factory=list)
