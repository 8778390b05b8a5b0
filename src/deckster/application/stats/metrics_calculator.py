"""
Metrics calculator for deck progress and review accuracy.

This is a pure computation module with no I/O. Nothing it returns is cached:
decks are small, so figures are recomputed from the card lists on every call.
"""

from collections.abc import Iterable

from deckster.domain.constants import MASTERED_THRESHOLD
from deckster.domain.models import Deck
from deckster.domain.stats.models import AggregateStats, DeckProgress, StatsOverview


class MetricsCalculator:
    """
    Derives per-deck and global figures from decks and aggregate counters.

    Stateless and side-effect free.
    """

    def deck_progress(self, deck: Deck) -> DeckProgress:
        total = len(deck.cards)
        reviewed = sum(1 for card in deck.cards if card.is_reviewed)
        mastered = sum(1 for card in deck.cards if card.difficulty >= MASTERED_THRESHOLD)
        progress = round(reviewed / total * 100) if total > 0 else 0
        return DeckProgress(
            name=deck.name,
            total=total,
            reviewed=reviewed,
            mastered=mastered,
            progress=progress,
        )

    def accuracy(self, stats: AggregateStats) -> int:
        if stats.total_reviews == 0:
            return 0
        return round(stats.correct / stats.total_reviews * 100)

    def overview(self, decks: Iterable[Deck], stats: AggregateStats) -> StatsOverview:
        progress = [self.deck_progress(deck) for deck in decks]

        correct_share = incorrect_share = None
        if stats.total_reviews > 0:
            correct_share = stats.correct / stats.total_reviews
            incorrect_share = stats.incorrect / stats.total_reviews

        return StatsOverview(
            total_cards=sum(p.total for p in progress),
            reviewed_cards=sum(p.reviewed for p in progress),
            mastered_cards=sum(p.mastered for p in progress),
            accuracy=self.accuracy(stats),
            total_reviews=stats.total_reviews,
            streak_count=stats.streak_count,
            correct_share=correct_share,
            incorrect_share=incorrect_share,
            decks=progress,
        )
