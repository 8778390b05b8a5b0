"""Tests for CLI commands: decks, cards, import, study, options, stats, config and data."""

import json
import logging

import pytest
from typer.testing import CliRunner

from deckster.application.config import AppConfig
from deckster.application.factory import build_services
from deckster.consts import VERSION
from deckster.domain.constants import SESSION_KEY
from deckster.interface.cli import app

runner = CliRunner()


@pytest.fixture
def data_dir(mock_home, tmp_path):
    return tmp_path / "data"


@pytest.fixture
def open_services(data_dir):
    """Services over the same storage file the CLI uses."""

    def _open():
        return build_services(AppConfig(data_dir=data_dir))

    return _open


@pytest.fixture
def deck(open_services):
    return open_services().decks.import_deck("Spanish", [("hola", "hello"), ("adios", "bye")])


def invoke(data_dir, *args, input=None):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args], input=input)


# --- Root ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "flashcard decks and study sessions" in result.stdout
    assert "study" in result.stdout
    assert "decks" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == VERSION


def test_config_show(data_dir):
    result = invoke(data_dir, "config", "show")

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["data_dir"] == str(data_dir.resolve())
    assert output["storage_backend"] == "file"


def test_config_path(mock_home):
    result = runner.invoke(app, ["config", "path"])
    assert result.stdout.strip() == str(mock_home / ".config/deckster/config.toml")


# --- Decks and cards ---


def test_decks_list_empty(data_dir):
    result = invoke(data_dir, "decks", "list")
    assert result.exit_code == 0
    assert "No decks yet" in result.stdout


def test_create_and_list(data_dir):
    result = invoke(data_dir, "decks", "create", "French")
    assert result.exit_code == 0
    assert "Created deck 'French'" in result.stdout

    result = invoke(data_dir, "decks", "list")
    assert "French" in result.stdout
    assert "(0/0 reviewed, 0 mastered)" in result.stdout


def test_create_blank_name_fails(data_dir):
    result = invoke(data_dir, "decks", "create", "  ")
    assert result.exit_code == 1
    assert "cannot be empty" in result.output


def test_rename_and_show(data_dir, deck):
    result = invoke(data_dir, "decks", "rename", deck.id, "Español")
    assert result.exit_code == 0

    result = invoke(data_dir, "decks", "show", deck.id)
    assert result.exit_code == 0
    assert "Español (2 cards)" in result.stdout
    assert "hola | hello" in result.stdout
    assert "reviewed never" in result.stdout


def test_show_missing_deck(data_dir):
    result = invoke(data_dir, "decks", "show", "ghost")
    assert result.exit_code == 1
    assert "Deck not found" in result.output


def test_delete_requires_confirmation(data_dir, deck, open_services):
    result = invoke(data_dir, "decks", "delete", deck.id, input="n\n")

    assert result.exit_code == 1
    assert open_services().decks.has_deck(deck.id)


def test_delete_clears_saved_session(data_dir, deck, open_services):
    invoke(data_dir, "study", deck.id, input="\n2\nq\n")
    assert open_services().storage.load(SESSION_KEY) is not None

    result = invoke(data_dir, "decks", "delete", deck.id, "--force")

    assert result.exit_code == 0
    services = open_services()
    assert not services.decks.has_deck(deck.id)
    assert services.storage.load(SESSION_KEY) is None


def test_card_add_edit_delete(data_dir, deck, open_services):
    result = invoke(data_dir, "cards", "add", deck.id, "gracias", "thanks")
    assert result.exit_code == 0
    card = open_services().decks.get_deck(deck.id).cards[-1]
    assert card.front == "gracias"

    result = invoke(data_dir, "cards", "edit", deck.id, card.id, "--back", "thank you")
    assert result.exit_code == 0
    assert open_services().decks.get_deck(deck.id).cards[-1].back == "thank you"

    result = invoke(data_dir, "cards", "delete", deck.id, card.id)
    assert result.exit_code == 0
    assert len(open_services().decks.get_deck(deck.id).cards) == 2


def test_card_edit_needs_a_change(data_dir, deck):
    result = invoke(data_dir, "cards", "edit", deck.id, deck.cards[0].id)
    assert result.exit_code == 2


def test_card_add_to_missing_deck(data_dir):
    result = invoke(data_dir, "cards", "add", "ghost", "a", "b")
    assert result.exit_code == 1


def test_import(data_dir, tmp_path, open_services):
    source = tmp_path / "words.csv"
    source.write_text("uno,one\n\nbroken line\ndos,two\n", encoding="utf-8")

    result = invoke(data_dir, "import", str(source), "--name", "Numbers")

    assert result.exit_code == 0
    assert "Imported 2 cards into 'Numbers'" in result.stdout
    (deck,) = open_services().decks.list_decks()
    assert [(c.front, c.back) for c in deck.cards] == [("uno", "one"), ("dos", "two")]


def test_import_tab_separated(data_dir, tmp_path, open_services):
    source = tmp_path / "words.tsv"
    source.write_text("uno\tone\n", encoding="utf-8")

    result = invoke(data_dir, "import", str(source), "-n", "Tabs", "--separator", "tab")

    assert result.exit_code == 0
    assert open_services().decks.list_decks()[0].cards[0].back == "one"


def test_import_non_utf8_file(data_dir, tmp_path, open_services):
    source = tmp_path / "latin1.csv"
    source.write_bytes(b"caf\xe9,coffee\n")

    result = invoke(data_dir, "import", str(source), "--name", "Latin")

    assert result.exit_code == 1
    assert "Cannot read" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert open_services().decks.list_decks() == []


def test_import_without_usable_rows(data_dir, tmp_path):
    source = tmp_path / "empty.csv"
    source.write_text("nothing here\n", encoding="utf-8")

    result = invoke(data_dir, "import", str(source), "--name", "Empty")

    assert result.exit_code == 1
    assert "No cards to import" in result.output


# --- Study ---


def test_study_full_session(data_dir, deck, open_services):
    result = invoke(data_dir, "study", deck.id, input="\n2\n\n0\n")

    assert result.exit_code == 0
    assert "[1/2] hola" in result.stdout
    assert "-> hello" in result.stdout
    assert "[2/2] adios" in result.stdout
    assert "Session complete!" in result.stdout
    assert "Cards reviewed: 2" in result.stdout
    assert "Accuracy: 50%" in result.stdout

    stats = open_services().stats.stats
    assert (stats.total_reviews, stats.correct, stats.incorrect) == (2, 1, 1)


def test_study_quit_and_resume(data_dir, deck):
    result = invoke(data_dir, "study", deck.id, input="\n3\nq\n")
    assert result.exit_code == 0
    assert "Progress saved." in result.stdout

    result = invoke(data_dir, "study", deck.id, input="\n3\n")
    assert result.exit_code == 0
    assert "[1/2]" not in result.stdout
    assert "[2/2] adios" in result.stdout
    assert "Cards reviewed: 2" in result.stdout
    assert "Accuracy: 100%" in result.stdout


def test_study_invalid_rating_repeats_card(data_dir, deck):
    result = invoke(data_dir, "study", deck.id, input="\n7\n\nabc\n\n2\nq\n")

    assert result.exit_code == 0
    assert result.stdout.count("Enter a rating from 0 to 3.") == 2
    assert result.stdout.count("[1/2] hola") == 3
    assert "[2/2] adios" in result.stdout


def test_study_completed_session_and_again(data_dir, deck):
    invoke(data_dir, "study", deck.id, input="\n2\n\n2\n")

    result = invoke(data_dir, "study", deck.id)
    assert result.exit_code == 0
    assert "Session complete!" in result.stdout
    assert "--again" in result.stdout

    result = invoke(data_dir, "study", deck.id, "--again", input="\n1\nq\n")
    assert result.exit_code == 0
    assert "[1/2]" in result.stdout


def test_study_new_subset(data_dir, deck):
    invoke(data_dir, "study", deck.id, input="\n2\nq\n")

    result = invoke(data_dir, "study", deck.id, "--new-subset", input="q\n")

    assert result.exit_code == 0
    assert "[1/2] hola" in result.stdout


def test_study_back_to_front(data_dir, deck):
    invoke(data_dir, "options", "set", "--direction", "back-to-front", "--show-both-sides")

    result = invoke(data_dir, "study", deck.id, input="\nq\n")

    assert "[1/2] hello" in result.stdout
    assert "-> hola" in result.stdout


def test_study_missing_deck(data_dir):
    result = invoke(data_dir, "study", "ghost")
    assert result.exit_code == 1
    assert "Deck not found" in result.output


def test_study_empty_deck(data_dir, open_services):
    empty = open_services().decks.create_deck("Empty")

    result = invoke(data_dir, "study", empty.id)

    assert result.exit_code == 0
    assert "No cards to study" in result.stdout


# --- Options ---


def test_options_show_defaults(data_dir):
    result = invoke(data_dir, "options", "show")

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "randomOrder": False,
        "direction": "front-to-back",
        "onlyMissed": False,
        "showBothSides": False,
        "autoRead": False,
        "cardLimit": None,
    }


def test_options_set_and_reset(data_dir, open_services):
    result = invoke(data_dir, "options", "set", "--random-order", "--card-limit", "5")
    assert result.exit_code == 0
    assert json.loads(result.stdout)["cardLimit"] == 5
    assert open_services().options.options.random_order is True

    result = invoke(data_dir, "options", "reset")
    assert result.exit_code == 0
    assert open_services().options.options.card_limit is None


def test_options_set_invalid_direction(data_dir):
    result = invoke(data_dir, "options", "set", "--direction", "sideways")
    assert result.exit_code == 1
    assert "Invalid direction" in result.output


def test_options_set_nothing(data_dir):
    result = invoke(data_dir, "options", "set")
    assert result.exit_code == 2


# --- Stats ---


def test_stats_without_reviews(data_dir, deck):
    result = invoke(data_dir, "stats")

    assert result.exit_code == 0
    assert "No reviews yet" in result.stdout
    assert "Spanish: 0/2 reviewed" in result.stdout


def test_stats_json(data_dir, deck):
    invoke(data_dir, "study", deck.id, input="\n3\n\n1\n")

    result = invoke(data_dir, "stats", "--json")

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["totalCards"] == 2
    assert output["reviewedCards"] == 2
    assert output["masteredCards"] == 1
    assert output["accuracy"] == 50
    assert output["totalReviews"] == 2
    assert output["streakCount"] == 0
    assert output["decks"][0]["progress"] == 100


# --- Data ---


def test_export_and_restore(data_dir, deck, tmp_path, open_services):
    backup = tmp_path / "backup.json"
    result = invoke(data_dir, "data", "export", "--output", str(backup))
    assert result.exit_code == 0
    exported = json.loads(backup.read_text(encoding="utf-8"))
    assert exported["decks"][0]["name"] == "Spanish"

    invoke(data_dir, "decks", "delete", deck.id, "--force")
    assert open_services().decks.list_decks() == []

    result = invoke(data_dir, "data", "restore", str(backup), "--force")
    assert result.exit_code == 0
    assert open_services().decks.get_deck(deck.id).name == "Spanish"


def test_export_to_stdout(data_dir, deck):
    result = invoke(data_dir, "data", "export")
    assert result.exit_code == 0
    assert "exportDate" in json.loads(result.stdout)


def test_restore_invalid_file(data_dir, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("not json", encoding="utf-8")

    result = invoke(data_dir, "data", "restore", str(bad), "--force")

    assert result.exit_code == 1
    assert "Failed to import data" in result.output


def test_restore_non_utf8_file(data_dir, tmp_path):
    backup = tmp_path / "backup.json"
    backup.write_bytes(b"\xff\xfe{}")

    result = invoke(data_dir, "data", "restore", str(backup), "--force")

    assert result.exit_code == 1
    assert "Cannot read" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_restore_missing_file(data_dir, tmp_path):
    result = invoke(data_dir, "data", "restore", str(tmp_path / "nope.json"), "--force")
    assert result.exit_code == 1


def test_clear(data_dir, deck, open_services):
    result = invoke(data_dir, "data", "clear", "--force")

    assert result.exit_code == 0
    assert open_services().decks.list_decks() == []


def test_info(data_dir, deck):
    result = invoke(data_dir, "data", "info")

    assert result.exit_code == 0
    assert "Items: 1" in result.stdout
    assert "Storage is not writable" not in result.stdout


# --- Verbosity ---


@pytest.fixture
def root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_verbose_flag_sets_log_level(data_dir, root_level):
    invoke(data_dir, "-vv", "decks", "list")
    assert root_level.level == logging.DEBUG

    invoke(data_dir, "-v", "decks", "list")
    assert root_level.level == logging.INFO

    invoke(data_dir, "decks", "list")
    assert root_level.level == logging.WARNING


def test_verbose_from_environment(data_dir, root_level, monkeypatch):
    monkeypatch.setenv("DECKSTER_VERBOSE", "1")

    result = invoke(data_dir, "config", "show")

    assert json.loads(result.stdout)["verbose"] == 1
    assert root_level.level == logging.INFO
