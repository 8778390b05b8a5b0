"""Helpers shared by the CLI command modules."""

import logging
from typing import NoReturn

import typer

from deckster.application.config import AppConfig, resolve_config
from deckster.application.factory import AppServices, build_services


def apply_verbosity(config: AppConfig) -> None:
    """0 keeps warnings only, 1 adds info, 2 or more adds debug output."""
    if config.verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif config.verbose == 1:
        logging.getLogger().setLevel(logging.INFO)
    else:
        logging.getLogger().setLevel(logging.WARNING)


def get_services(ctx: typer.Context) -> AppServices:
    """Build the application services once per invocation from the resolved config."""
    obj = ctx.ensure_object(dict)
    if "services" not in obj:
        config = resolve_config(obj.get("overrides"))
        apply_verbosity(config)
        obj["services"] = build_services(config)
    return obj["services"]


def warn_on_storage_error(services: AppServices) -> None:
    """Print the last storage failure, if any, as a non-fatal warning."""
    if services.storage.last_error:
        typer.secho(
            f"Warning: {services.storage.last_error}. Changes are kept for this run only.",
            fg="yellow",
            err=True,
        )
        services.storage.clear_error()


def fail(message: str, code: int = 1) -> NoReturn:
    typer.secho(message, fg="red", err=True)
    raise typer.Exit(code)
