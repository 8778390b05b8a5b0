import random

import pytest

from deckster.application.deck_store import DeckStore
from deckster.application.factory import AppServices
from deckster.application.session_persistence import SessionPersistence
from deckster.application.stats.service import ReviewStatsService
from deckster.application.storage import StorageService
from deckster.application.study_options import StudyOptionsStore
from deckster.domain.models import Card, Deck
from deckster.infrastructure.storage import InMemoryStore

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = 1_760_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, hours: float = 0, ms: int = 0) -> None:
        self.now_ms += int(hours * HOUR_MS) + ms


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def storage(store):
    return StorageService(store)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_services(clock):
    """Build a fresh set of services over a given store, as a restarted app would."""

    def _make(store) -> AppServices:
        storage = StorageService(store)
        return AppServices(
            storage=storage,
            decks=DeckStore(storage),
            options=StudyOptionsStore(storage),
            stats=ReviewStatsService(storage),
            persistence=SessionPersistence(storage, clock=clock),
        )

    return _make


@pytest.fixture
def services(make_services, store):
    return make_services(store)


@pytest.fixture
def make_deck():
    """Build an in-memory deck with numbered cards and the given difficulties."""

    def _make(difficulties: list[int], deck_id: str = "deck-1", name: str = "Test") -> Deck:
        cards = [
            Card(id=f"c{i}", front=f"front {i}", back=f"back {i}", difficulty=d)
            for i, d in enumerate(difficulties)
        ]
        return Deck(id=deck_id, name=name, cards=cards)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and data
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "DECKSTER_DATA_DIR",
        "DECKSTER_STORAGE_BACKEND",
        "DECKSTER_SESSION_TTL_HOURS",
        "DECKSTER_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
