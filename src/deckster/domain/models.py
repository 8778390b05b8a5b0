"""
Domain records for decks, cards, study options and study sessions.

Every persisted record serializes to the camelCase JSON shape written to the
key-value store. Unknown fields read from storage are kept and written back
unchanged so records tolerate additions made by newer versions.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from deckster.domain.constants import (
    CORRECT_THRESHOLD,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
)

Direction = Literal["front-to-back", "back-to-front", "random"]
StudyDirection = Literal["front-to-back", "back-to-front"]
DIRECTIONS: tuple[str, ...] = ("front-to-back", "back-to-front", "random")

# Legacy data carries numeric ids (epoch millis, sometimes with a fraction).
EntityId = int | float | str


def same_id(a: EntityId | None, b: EntityId | None) -> bool:
    """Compare ids loosely so "1700000000000" matches 1700000000000."""
    if a is None or b is None:
        return False
    return a == b or str(a) == str(b)


def is_correct(difficulty: int) -> bool:
    return difficulty >= CORRECT_THRESHOLD


class Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_record(self) -> dict[str, Any]:
        """Dump to the JSON-ready wire shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Card(Record):
    id: EntityId
    front: str = ""
    back: str = ""
    difficulty: int = MIN_DIFFICULTY
    last_reviewed: datetime | None = None

    # Optional image references shown alongside the text faces
    front_image_url: str | None = None
    back_image_url: str | None = None
    image_url: str | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _coerce_difficulty(cls, v: Any) -> int:
        try:
            value = int(v or 0)
        except (TypeError, ValueError):
            return MIN_DIFFICULTY
        return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, value))

    @field_validator("last_reviewed", mode="before")
    @classmethod
    def _lenient_timestamp(cls, v: Any) -> datetime | None:
        if v is None or v == "":
            return None
        if isinstance(v, datetime):
            return v
        try:
            return datetime.fromisoformat(str(v).replace("Z", "+00:00"))
        except ValueError:
            return None

    @property
    def is_reviewed(self) -> bool:
        return self.last_reviewed is not None


class Deck(Record):
    id: EntityId
    name: str
    cards: list[Card] = Field(default_factory=list)

    def find_card(self, card_id: EntityId) -> Card | None:
        for card in self.cards:
            if same_id(card.id, card_id):
                return card
        return None


class StudyOptions(Record):
    random_order: bool = False
    direction: Direction = "front-to-back"
    only_missed: bool = False
    show_both_sides: bool = False
    auto_read: bool = False
    card_limit: int | None = None

    @field_validator("card_limit", mode="before")
    @classmethod
    def _positive_limit(cls, v: Any) -> int | None:
        if v is None or v == "":
            return None
        value = int(v)
        return value if value > 0 else None

    def to_record(self) -> dict[str, Any]:
        # cardLimit is written as null rather than dropped
        return self.model_dump(mode="json", by_alias=True)


class StudyCard(Card):
    """A card as presented in one session, with its faces resolved."""

    study_direction: StudyDirection
    display_front: str
    display_back: str
    display_front_image: str | None = None
    display_back_image: str | None = None

    @classmethod
    def from_card(cls, card: Card, direction: StudyDirection) -> "StudyCard":
        forward = direction == "front-to-back"
        back_image = card.back_image_url or card.image_url
        return cls.model_validate(
            {
                **card.to_record(),
                "studyDirection": direction,
                "displayFront": card.front if forward else card.back,
                "displayBack": card.back if forward else card.front,
                "displayFrontImage": card.front_image_url if forward else back_image,
                "displayBackImage": back_image if forward else card.front_image_url,
            }
        )


class SessionStats(Record):
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> int:
        """Rounded percentage of correct answers (0 before any answer)."""
        if self.total == 0:
            return 0
        return round(self.correct / self.total * 100)


class SessionState(Record):
    """
    Persisted snapshot of a study session.

    Older snapshots used currentCardIndex/showResult/studyCards/originalStudyCards
    and kept the index on the last card once finished; both shapes are read.
    """

    deck_id: EntityId
    card_order: list[StudyCard] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cardOrder", "studyCards", "card_order"),
        serialization_alias="cardOrder",
    )
    original_card_order: list[StudyCard] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "originalCardOrder", "originalStudyCards", "original_card_order"
        ),
        serialization_alias="originalCardOrder",
    )
    current_index: int = Field(
        default=0,
        validation_alias=AliasChoices("currentIndex", "currentCardIndex", "current_index"),
        serialization_alias="currentIndex",
    )
    completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("completed", "showResult"),
        serialization_alias="completed",
    )
    session_stats: SessionStats = Field(default_factory=SessionStats)
    timestamp: int = 0  # epoch millis

    @model_validator(mode="after")
    def _normalize(self) -> "SessionState":
        if self.original_card_order is None:
            self.original_card_order = list(self.card_order)
        length = len(self.card_order)
        if self.completed:
            self.current_index = length
        else:
            self.current_index = max(0, min(self.current_index, length))
            if length and self.current_index == length:
                self.completed = True
            # An unfinished pass has answered exactly the cards before the index
            if not self.completed and self.session_stats.total != self.current_index:
                total = self.current_index
                self.session_stats = SessionStats(
                    correct=max(0, min(self.session_stats.correct, total)), total=total
                )
        return self
