"""Study session and study option commands."""

import json
from typing import Annotated

import typer

from deckster.application.session import SessionStatus, StudySession
from deckster.domain.constants import DIFFICULTY_LABELS
from deckster.domain.errors import SessionError, ValidationError
from deckster.interface._common import fail, get_services, warn_on_storage_error

options_app = typer.Typer(help="Show and change study options.", no_args_is_help=True)

_QUIT = "q"


def _print_summary(session: StudySession) -> None:
    stats = session.session_stats
    typer.secho("\nSession complete!", fg="green", bold=True)
    typer.echo(f"Cards reviewed: {stats.total}")
    typer.echo(f"Accuracy: {stats.accuracy}%")


def _rating_prompt() -> str:
    labels = " ".join(f"{value}={label}" for value, label in DIFFICULTY_LABELS.items())
    return f"Rate {labels} ({_QUIT} to quit)"


def study(
    ctx: typer.Context,
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    again: Annotated[
        bool,
        typer.Option("--again", help="Replay the same cards in a fresh order."),
    ] = False,
    new_subset: Annotated[
        bool,
        typer.Option("--new-subset", help="Discard saved progress and pick cards again."),
    ] = False,
):
    """Study a deck. Progress is saved after every card; a session resumes for 24 hours."""
    services = get_services(ctx)
    session = services.open_session()

    try:
        session.start(deck_id)
        if session.deck_id is None:
            fail(f"Deck not found: {deck_id}")

        if new_subset:
            session.reset_new_subset()
        elif again:
            session.reset_keep_subset()
    except SessionError as e:
        fail(str(e))

    if session.status is SessionStatus.EMPTY:
        typer.echo("No cards to study. Add cards or change the study options.")
        return

    if session.status is SessionStatus.COMPLETE:
        _print_summary(session)
        typer.echo("Run again with --again to review the same cards.")
        return

    show_both = services.options.options.show_both_sides

    while session.status is SessionStatus.IN_PROGRESS:
        card = session.current_card
        answered, total = session.progress
        typer.secho(f"\n[{answered + 1}/{total}] {card.display_front}", bold=True)

        reply = typer.prompt(
            f"Press Enter to flip ({_QUIT} to quit)", default="", show_default=False
        )
        if reply.strip().lower() == _QUIT:
            typer.echo("Progress saved.")
            warn_on_storage_error(services)
            return

        if show_both:
            typer.echo(f"  {card.display_front}")
        typer.echo(f"  -> {card.display_back}")

        reply = typer.prompt(_rating_prompt())
        if reply.strip().lower() == _QUIT:
            typer.echo("Progress saved.")
            warn_on_storage_error(services)
            return

        try:
            session.submit_review(int(reply))
        except (ValueError, ValidationError):
            typer.secho("Enter a rating from 0 to 3.", fg="yellow")
            continue
        warn_on_storage_error(services)

    _print_summary(session)


# ---------------------------------------------------------------------------
# Options subgroup
# ---------------------------------------------------------------------------


@options_app.command("show")
def options_show(ctx: typer.Context):
    """Display the current study options."""
    services = get_services(ctx)
    typer.echo(json.dumps(services.options.options.to_record(), indent=2))


@options_app.command("set")
def options_set(
    ctx: typer.Context,
    direction: Annotated[
        str | None,
        typer.Option(help="Which face is shown first: front-to-back, back-to-front or random."),
    ] = None,
    random_order: Annotated[
        bool | None,
        typer.Option("--random-order/--in-order", help="Shuffle cards each session."),
    ] = None,
    only_missed: Annotated[
        bool | None,
        typer.Option("--only-missed/--all-cards", help="Study only cards rated Again or Hard."),
    ] = None,
    show_both_sides: Annotated[
        bool | None,
        typer.Option("--show-both-sides/--show-back-only", help="Show both faces on flip."),
    ] = None,
    auto_read: Annotated[
        bool | None,
        typer.Option("--auto-read/--no-auto-read", help="Read cards aloud."),
    ] = None,
    card_limit: Annotated[
        int | None,
        typer.Option(help="Maximum cards per session; 0 removes the limit."),
    ] = None,
):
    """Change one or more study options."""
    changes = {
        "direction": direction,
        "random_order": random_order,
        "only_missed": only_missed,
        "show_both_sides": show_both_sides,
        "auto_read": auto_read,
        "card_limit": card_limit,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        fail("Nothing to change. See 'deckster options set --help'.", code=2)

    services = get_services(ctx)
    try:
        options = services.options.update(**changes)
    except ValidationError as e:
        fail(str(e))
    warn_on_storage_error(services)
    typer.echo(json.dumps(options.to_record(), indent=2))


@options_app.command("reset")
def options_reset(ctx: typer.Context):
    """Restore the default study options."""
    services = get_services(ctx)
    options = services.options.reset()
    warn_on_storage_error(services)
    typer.echo(json.dumps(options.to_record(), indent=2))
