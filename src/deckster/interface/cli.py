"""deckster CLI: root commands and subgroup registration."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from deckster.application.config import config_file_path, resolve_config
from deckster.consts import VERSION
from deckster.interface._common import (
    apply_verbosity,
    fail,
    get_services,
    warn_on_storage_error,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="deckster: flashcard decks and study sessions in your terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

from deckster.interface.deck_commands import cards_app, decks_app, import_cards  # noqa: E402
from deckster.interface.study_commands import options_app, study  # noqa: E402

app.add_typer(decks_app, name="decks")
app.add_typer(cards_app, name="cards")
app.add_typer(options_app, name="options")
app.command("import")(import_cards)
app.command("study")(study)

config_app = typer.Typer(help="Inspect deckster configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

data_app = typer.Typer(help="Back up, restore and clear stored data.", no_args_is_help=True)
app.add_typer(data_app, name="data")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding the storage file.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for deckster."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"data_dir": data_dir, "verbose": verbose or None}


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def version():
    """Print the deckster version."""
    typer.echo(VERSION)


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show review statistics across all decks."""
    services = get_services(ctx)
    overview = services.stats.overview(services.decks.list_decks())

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "totalCards": overview.total_cards,
                    "reviewedCards": overview.reviewed_cards,
                    "masteredCards": overview.mastered_cards,
                    "accuracy": overview.accuracy,
                    "totalReviews": overview.total_reviews,
                    "streakCount": overview.streak_count,
                    "decks": [
                        {
                            "name": d.name,
                            "total": d.total,
                            "reviewed": d.reviewed,
                            "mastered": d.mastered,
                            "progress": d.progress,
                        }
                        for d in overview.decks
                    ],
                },
                indent=2,
            )
        )
        return

    typer.echo(
        f"Cards: {overview.total_cards}  Reviewed: {overview.reviewed_cards}"
        f"  Mastered: {overview.mastered_cards}"
    )
    if overview.total_reviews == 0:
        typer.secho("No reviews yet. Start studying to see your statistics!", fg="yellow")
    else:
        typer.echo(
            f"Reviews: {overview.total_reviews}  Accuracy: {overview.accuracy}%"
            f"  Streak: {overview.streak_count}"
        )
        typer.echo(
            f"Correct: {overview.correct_share:.0%}  Incorrect: {overview.incorrect_share:.0%}"
        )

    for d in overview.decks:
        typer.echo(
            f"  {d.name}: {d.reviewed}/{d.total} reviewed, {d.mastered} mastered ({d.progress}%)"
        )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = resolve_config(ctx.obj.get("overrides") if ctx.obj else None)
    apply_verbosity(config)
    d ={k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@config_app.command("path")
def config_path():
    """Print where the optional config file is read from."""
    typer.echo(str(config_file_path()))


# ---------------------------------------------------------------------------
# Data subgroup
# ---------------------------------------------------------------------------


@data_app.command("export")
def data_export(
    ctx: typer.Context,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout.")
    ] = None,
):
    """Export decks and statistics as JSON."""
    services = get_services(ctx)
    text = services.storage.export_data()
    if text is None:
        fail(services.storage.last_error or "Export failed")

    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    typer.secho(f"Exported to {output}.", fg="green")


@data_app.command("restore")
def data_restore(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="JSON file produced by 'data export'.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Replace decks and statistics with the contents of an export file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        fail(f"Cannot read {path}: {e}")

    if not force:
        typer.confirm("Replace all decks and statistics?", abort=True)

    services = get_services(ctx)
    if not services.storage.import_data(text):
        fail(services.storage.last_error or "Restore failed")
    typer.secho("Data restored.", fg="green")


@data_app.command("clear")
def data_clear(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete all decks, statistics and study options."""
    if not force:
        typer.confirm("Delete all stored deckster data?", abort=True)

    services = get_services(ctx)
    ok = services.storage.clear() and services.persistence.clear()
    warn_on_storage_error(services)
    if not ok:
        raise typer.Exit(1)
    typer.echo("All data cleared.")


@data_app.command("info")
def data_info(ctx: typer.Context):
    """Show storage usage."""
    services = get_services(ctx)
    info = services.storage.storage_info()
    typer.echo(
        f"Items: {info['itemCount']}  Size: {info['totalSize']} bytes"
        f"  Used: {info['usedPercentage']:.1f}%"
    )
    if info["isNearLimit"]:
        typer.secho("Storage is nearly full.", fg="yellow")
    if not services.storage.is_available():
        typer.secho("Storage is not writable.", fg="red")


def run():
    app()
