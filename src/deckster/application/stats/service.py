"""
Review Stats Service: Application layer owner of the aggregate counters.

Loads AggregateStats once, applies every review outcome to it, and writes the
result back immediately.
"""

import logging
from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError

from deckster.application.storage import StorageService
from deckster.domain.constants import STATS_KEY
from deckster.domain.models import Deck, is_correct
from deckster.domain.stats.models import AggregateStats, StatsOverview

from .metrics_calculator import MetricsCalculator

logger = logging.getLogger(__name__)


class ReviewStatsService:
    """
    Application service for aggregate review statistics.

    Depends on the StorageService for persistence and on MetricsCalculator
    for everything derived.
    """

    def __init__(
        self,
        storage: StorageService,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            storage: Where the aggregate record is read from and written to.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self.storage = storage
        self._calc = calculator or MetricsCalculator()
        self._stats = self._load()

    def _load(self) -> AggregateStats:
        raw = self.storage.load(STATS_KEY, None)
        if raw is None:
            return AggregateStats()
        try:
            return AggregateStats.model_validate(raw)
        except (PydanticValidationError, TypeError) as e:
            logger.warning(f"Unreadable review stats, starting from zero: {e}")
            return AggregateStats()

    @property
    def stats(self) -> AggregateStats:
        return self._stats.model_copy()

    def record(self, difficulty: int) -> bool:
        """
        Count one review.

        Good/Easy (difficulty >= 2) are correct and extend the streak;
        Again/Hard are incorrect and reset it.

        Returns:
            Whether the review counted as correct.
        """
        correct = is_correct(difficulty)
        s = self._stats
        self._stats = s.model_copy(
            update={
                "total_reviews": s.total_reviews + 1,
                "correct": s.correct + (1 if correct else 0),
                "incorrect": s.incorrect + (0 if correct else 1),
                "streak_count": s.streak_count + 1 if correct else 0,
            }
        )
        self.storage.save(STATS_KEY, self._stats.to_record())
        return correct

    def reset(self) -> AggregateStats:
        self._stats = AggregateStats()
        self.storage.save(STATS_KEY, self._stats.to_record())
        return self.stats

    def accuracy(self) -> int:
        return self._calc.accuracy(self._stats)

    def overview(self, decks: Iterable[Deck]) -> StatsOverview:
        return self._calc.overview(decks, self._stats)
