"""Study option set: process-wide study configuration with write-through persistence."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from deckster.application.storage import StorageService
from deckster.domain.constants import STUDY_OPTIONS_KEY
from deckster.domain.errors import ValidationError
from deckster.domain.models import DIRECTIONS, StudyOptions

logger = logging.getLogger(__name__)


class StudyOptionsStore:
    """
    Holds the single StudyOptions value.

    Loaded once on construction; missing or unreadable data yields the defaults.
    Every change is persisted immediately. Readers get a copy, so the session
    builder can never mutate the stored options.
    """

    def __init__(self, storage: StorageService):
        self.storage = storage
        self._options = self._load()

    def _load(self) -> StudyOptions:
        raw = self.storage.load(STUDY_OPTIONS_KEY, None)
        if raw is None:
            return StudyOptions()
        try:
            return StudyOptions.model_validate(raw)
        except (PydanticValidationError, TypeError, ValueError) as e:
            logger.warning(f"Unreadable study options, using defaults: {e}")
            return StudyOptions()

    @property
    def options(self) -> StudyOptions:
        return self._options.model_copy()

    def _replace(self, options: StudyOptions) -> StudyOptions:
        self._options = options
        self.storage.save(STUDY_OPTIONS_KEY, options.to_record())
        return self.options

    def update(self, **changes: Any) -> StudyOptions:
        """
        Apply several option changes at once.

        Keys are field names (random_order, direction, ...). Values are coerced
        to the field types; anything that cannot be coerced is rejected.

        Raises:
            ValidationError: on unknown keys or invalid values. Nothing is saved.
        """
        unknown = set(changes) - set(StudyOptions.model_fields)
        if unknown:
            raise ValidationError(f"Unknown study option(s): {', '.join(sorted(unknown))}")

        if "direction" in changes and changes["direction"] not in DIRECTIONS:
            raise ValidationError(
                f"Invalid direction {changes['direction']!r}; "
                f"expected one of {', '.join(DIRECTIONS)}"
            )

        merged = {**self._options.model_dump(), **changes}
        try:
            options = StudyOptions.model_validate(merged)
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid study options: {e}") from e
        return self._replace(options)

    def set_direction(self, direction: str) -> StudyOptions:
        return self.update(direction=direction)

    def set_card_limit(self, limit: int | None) -> StudyOptions:
        return self.update(card_limit=limit)

    def reset(self) -> StudyOptions:
        return self._replace(StudyOptions())
