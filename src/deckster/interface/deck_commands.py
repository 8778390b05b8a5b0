"""Deck and card management commands."""

from pathlib import Path
from typing import Annotated, Literal

import typer

from deckster.application.utils.text import parse_card_lines
from deckster.domain.errors import ValidationError
from deckster.interface._common import fail, get_services, warn_on_storage_error

decks_app = typer.Typer(help="Create, list, rename and delete decks.", no_args_is_help=True)
cards_app = typer.Typer(help="Add, edit and delete cards in a deck.", no_args_is_help=True)


# ---------------------------------------------------------------------------
# Decks
# ---------------------------------------------------------------------------


@decks_app.command("list")
def list_decks(ctx: typer.Context):
    """List decks with their review progress."""
    services = get_services(ctx)
    decks = services.decks.list_decks()
    if not decks:
        typer.echo("No decks yet. Create one with 'deckster decks create NAME'.")
        return

    overview = services.stats.overview(decks)
    for deck, p in zip(decks, overview.decks):
        typer.echo(
            f"{deck.id}  {deck.name}  "
            f"({p.reviewed}/{p.total} reviewed, {p.mastered} mastered)"
        )


@decks_app.command("create")
def create_deck(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the new deck.")],
):
    """Create an empty deck."""
    services = get_services(ctx)
    try:
        deck = services.decks.create_deck(name)
    except ValidationError as e:
        fail(str(e))
    warn_on_storage_error(services)
    typer.secho(f"Created deck '{deck.name}' ({deck.id}).", fg="green")


@decks_app.command("rename")
def rename_deck(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    name: Annotated[str, typer.Argument(help="New name.")],
):
    """Rename a deck."""
    services = get_services(ctx)
    try:
        ok = services.decks.rename_deck(deck_id, name)
    except ValidationError as e:
        fail(str(e))
    if not ok:
        fail(f"Deck not found: {deck_id}")
    warn_on_storage_error(services)
    typer.echo(f"Renamed deck {deck_id}.")


@decks_app.command("delete")
def delete_deck(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete a deck and all of its cards."""
    services = get_services(ctx)
    deck = services.decks.get_deck(deck_id)
    if deck is None:
        fail(f"Deck not found: {deck_id}")

    if not force:
        typer.confirm(f"Delete '{deck.name}' and its {len(deck.cards)} cards?", abort=True)

    services.decks.delete_deck(deck.id)
    if services.persistence.load(deck.id) is not None:
        services.persistence.clear()

    warn_on_storage_error(services)
    typer.echo(f"Deleted deck '{deck.name}'.")


@decks_app.command("show")
def show_deck(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
):
    """Show every card in a deck."""
    services = get_services(ctx)
    deck = services.decks.get_deck(deck_id)
    if deck is None:
        fail(f"Deck not found: {deck_id}")

    typer.secho(f"{deck.name} ({len(deck.cards)} cards)", bold=True)
    for card in deck.cards:
        reviewed = card.last_reviewed.strftime("%Y-%m-%d") if card.last_reviewed else "never"
        typer.echo(
            f"  {card.id}  {card.front} | {card.back}  "
            f"[difficulty {card.difficulty}, reviewed {reviewed}]"
        )


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


@cards_app.command("add")
def add_card(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    front: Annotated[str, typer.Argument(help="Front text.")],
    back: Annotated[str, typer.Argument(help="Back text.")],
):
    """Append a card to a deck."""
    services = get_services(ctx)
    try:
        card = services.decks.add_card(deck_id, front, back)
    except ValidationError as e:
        fail(str(e))
    if card is None:
        fail(f"Deck not found: {deck_id}")
    warn_on_storage_error(services)
    typer.echo(f"Added card {card.id}.")


@cards_app.command("edit")
def edit_card(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    card_id: Annotated[str, typer.Argument(help="Card id.")],
    front: Annotated[str | None, typer.Option(help="New front text.")] = None,
    back: Annotated[str | None, typer.Option(help="New back text.")] = None,
):
    """Change the text of a card."""
    if front is None and back is None:
        fail("Nothing to change. Pass --front and/or --back.", code=2)

    services = get_services(ctx)
    try:
        card = services.decks.update_card(deck_id, card_id, front=front, back=back)
    except ValidationError as e:
        fail(str(e))
    if card is None:
        fail(f"Card not found: {deck_id}/{card_id}")
    warn_on_storage_error(services)
    typer.echo(f"Updated card {card.id}.")


@cards_app.command("delete")
def delete_card(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    card_id: Annotated[str, typer.Argument(help="Card id.")],
):
    """Remove a card from a deck."""
    services = get_services(ctx)
    if not services.decks.delete_card(deck_id, card_id):
        fail(f"Card not found: {deck_id}/{card_id}")
    warn_on_storage_error(services)
    typer.echo(f"Deleted card {card_id}.")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def import_cards(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Text file with one 'front,back' pair per line.")],
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the new deck.")],
    separator: Annotated[
        Literal["comma", "tab"], typer.Option(help="Field separator: comma or tab.")
    ] = "comma",
):
    """Create a deck from a comma- or tab-separated text file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        fail(f"Cannot read {path}: {e}")

    services = get_services(ctx)
    rows = parse_card_lines(text, separator)
    try:
        deck = services.decks.import_deck(name, rows)
    except ValidationError as e:
        fail(str(e))
    warn_on_storage_error(services)
    typer.secho(
        f"Imported {len(deck.cards)} cards into '{deck.name}' ({deck.id}).", fg="green"
    )
