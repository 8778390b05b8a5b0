import pytest

from deckster.application.study_options import StudyOptionsStore
from deckster.domain.constants import STUDY_OPTIONS_KEY
from deckster.domain.errors import ValidationError
from deckster.domain.models import StudyOptions


@pytest.fixture
def options(storage):
    return StudyOptionsStore(storage)


def test_defaults(options):
    assert options.options == StudyOptions(
        random_order=False,
        direction="front-to-back",
        only_missed=False,
        show_both_sides=False,
        auto_read=False,
        card_limit=None,
    )


def test_update_persists_wire_shape(options, storage):
    options.update(random_order=True, direction="random", card_limit=10)

    assert storage.load(STUDY_OPTIONS_KEY) == {
        "randomOrder": True,
        "direction": "random",
        "onlyMissed": False,
        "showBothSides": False,
        "autoRead": False,
        "cardLimit": 10,
    }


def test_options_survive_reload(options, storage):
    options.update(only_missed=True)

    assert StudyOptionsStore(storage).options.only_missed is True


def test_readers_get_a_copy(options):
    copy = options.options
    copy.random_order = True

    assert options.options.random_order is False


@pytest.mark.parametrize("direction", ["sideways", "", "Random"])
def test_invalid_direction_is_rejected(options, storage, direction):
    with pytest.raises(ValidationError):
        options.set_direction(direction)
    assert options.options.direction == "front-to-back"
    assert storage.load(STUDY_OPTIONS_KEY) is None


def test_unknown_option_is_rejected(options):
    with pytest.raises(ValidationError, match="shuffle"):
        options.update(shuffle=True)


def test_uncoercible_value_is_rejected(options):
    with pytest.raises(ValidationError):
        options.update(card_limit="lots")


@pytest.mark.parametrize("limit", [0, -5, None])
def test_non_positive_limit_means_no_limit(options, limit):
    options.set_card_limit(20)

    assert options.set_card_limit(limit).card_limit is None


def test_limit_is_written_as_null(options, storage):
    options.set_card_limit(None)
    assert storage.load(STUDY_OPTIONS_KEY)["cardLimit"] is None


def test_reset(options):
    options.update(random_order=True, auto_read=True)

    assert options.reset() == StudyOptions()


def test_corrupt_options_fall_back_to_defaults(storage):
    storage.save(STUDY_OPTIONS_KEY, {"direction": "upside-down"})

    assert StudyOptionsStore(storage).options == StudyOptions()


def test_partial_record_fills_defaults(storage):
    storage.save(STUDY_OPTIONS_KEY, {"randomOrder": True})

    loaded = StudyOptionsStore(storage).options
    assert loaded.random_order is True
    assert loaded.direction == "front-to-back"
