"""Cardwise CLI: review, import, serve and config commands."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from cardwise.application.config import AppConfig, resolve_config
from cardwise.domain.errors import CardwiseError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cardwise: AI-validated flashcard reviews with spaced-repetition scheduling.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cardwise configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _resolve(ctx: typer.Context, **overrides) -> AppConfig:
    """CLI commands persist between invocations, so they always use SQLite."""
    overrides.setdefault("store", "sqlite")
    config = resolve_config(overrides)
    verbose = ctx.obj.get("verbose", config.verbose) if ctx.obj else config.verbose
    logging.getLogger().setLevel(LOG_LEVELS.get(verbose, logging.DEBUG))
    return config


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for cardwise."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    user_id: Annotated[str, typer.Argument(help="Reviewer id recorded in the audit log.")],
    answer: Annotated[str, typer.Argument(help="Your answer.")],
    database: Annotated[
        Path | None, typer.Option("--database", "-d", help="SQLite database path.")
    ] = None,
):
    """[bold green]Review[/bold green] a card with a free-text answer."""
    config = _resolve(ctx, database_path=database)

    from cardwise.application.factory import build_services

    services = build_services(config)

    async def _review():
        try:
            return await services.reviews.review(card_id, user_id, answer)
        finally:
            await services.aclose()

    try:
        outcome = asyncio.run(_review())
    except CardwiseError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(
        json.dumps(
            {
                "card_id": outcome.card_id,
                "ai_score": round(outcome.score, 4),
                "fsrs_rating": int(outcome.rating),
                "validation_method": outcome.method.value,
                "next_review_in_days": outcome.scheduled_days,
            },
            indent=2,
        )
    )


@app.command("import")
def import_deck(
    ctx: typer.Context,
    path: Annotated[
        Path, typer.Argument(help="Deck file (.tsv/.txt or YAML).", exists=True, dir_okay=False)
    ],
    user_id: Annotated[str, typer.Option("--user", "-u", help="Owner of the new cards.")],
    deck_id: Annotated[
        str | None, typer.Option(help="Deck id; defaults to the file's deck name.")
    ] = None,
    database: Annotated[
        Path | None, typer.Option("--database", "-d", help="SQLite database path.")
    ] = None,
):
    """Import question/answer pairs from a TSV or YAML deck file."""
    config = _resolve(ctx, database_path=database)

    from cardwise.application.factory import build_services
    from cardwise.infrastructure.adapters.deck_loader import load_deck

    try:
        deck = load_deck(path)
    except CardwiseError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(code=1) from e

    target = deck_id or deck.name
    services = build_services(config)

    async def _import():
        try:
            return await services.cards.import_cards(
                user_id, deck.pairs, deck_id=target, skipped=deck.skipped
            )
        finally:
            await services.aclose()

    result = asyncio.run(_import())

    typer.echo(
        f"Imported {result.cards_imported} cards into '{target}' "
        f"({result.cards_skipped} skipped)"
    )
    for card_id in result.card_ids:
        typer.echo(card_id)


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port.")] = None,
):
    """Run the HTTP server."""
    import uvicorn

    config = resolve_config({"host": host, "port": port})
    uvicorn.run("cardwise.server:app", host=config.host, port=config.port)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Print the resolved configuration as JSON (secrets masked)."""
    config = resolve_config()
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))
