"""
Service factory.
Centralizes the wiring of storage, stores and session collaborators.
"""

import logging
import random
from dataclasses import dataclass

from deckster.application.config import AppConfig
from deckster.application.deck_store import DeckStore
from deckster.application.session import StudySession
from deckster.application.session_persistence import SessionPersistence
from deckster.application.stats.service import ReviewStatsService
from deckster.application.storage import StorageService
from deckster.application.study_options import StudyOptionsStore
from deckster.domain.ports import KeyValueStore
from deckster.infrastructure.storage import InMemoryStore, JsonFileStore

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    storage: StorageService
    decks: DeckStore
    options: StudyOptionsStore
    stats: ReviewStatsService
    persistence: SessionPersistence

    def open_session(self, rng: random.Random | None = None) -> StudySession:
        return StudySession(
            decks=self.decks,
            options=self.options,
            stats=self.stats,
            persistence=self.persistence,
            rng=rng,
        )


def get_store(config: AppConfig) -> KeyValueStore:
    """
    Returns the KeyValueStore implementation selected by config.
    """
    if config.storage_backend == "memory":
        return InMemoryStore(quota_bytes=config.storage_quota_bytes)

    logger.debug(f"Using storage file {config.store_path}")
    return JsonFileStore(config.store_path, quota_bytes=config.storage_quota_bytes)


def build_services(config: AppConfig, store: KeyValueStore | None = None) -> AppServices:
    storage = StorageService(store or get_store(config), quota_bytes=config.storage_quota_bytes)
    return AppServices(
        storage=storage,
        decks=DeckStore(storage),
        options=StudyOptionsStore(storage),
        stats=ReviewStatsService(storage),
        persistence=SessionPersistence(storage, ttl_hours=config.session_ttl_hours),
    )
