# Domain Stats Package
from .models import AggregateStats, DeckProgress, StatsOverview

__all__ = ["AggregateStats", "DeckProgress", "StatsOverview"]
