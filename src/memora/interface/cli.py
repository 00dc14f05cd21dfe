"""memora CLI — local study commands over the scheduling engine."""

import asyncio
import dataclasses
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from memora.application.config import AppConfig, resolve_config
from memora.domain.exceptions import MemoraError
from memora.domain.review.models import ReviewItem

app = typer.Typer(
    help="memora: spaced-repetition vocabulary review.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Manage memora configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> AppConfig:
    config = resolve_config(ctx.obj)
    logging.getLogger("memora").setLevel(config.log_level)
    return config


def _fail(error: Exception) -> typer.Exit:
    typer.secho(f"Error: {error}", fg="red", err=True)
    return typer.Exit(1)


def _describe(item: ReviewItem) -> str:
    label = item.front or item.id
    return (
        f"{label} [{item.id}] next={item.next_review:%Y-%m-%d %H:%M} "
        f"interval={item.interval}d reps={item.repetition} ease={item.ease_factor:.2f}"
    )


def _to_json(obj) -> str:
    def default(o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Path):
            return str(o)
        raise TypeError(f"Cannot serialize {type(o).__name__}")

    return json.dumps(obj, indent=2, default=default)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding review data.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for memora."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["verbose"] = verbose + 1 if verbose else None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item id.")],
    front: Annotated[str, typer.Argument(help="Prompt text.")],
    back: Annotated[str, typer.Argument(help="Answer text.")],
):
    """[bold green]Add[/bold green] a vocabulary item to the review cycle."""
    from memora.application.factory import get_session_service

    config = _config(ctx)

    async def run() -> ReviewItem:
        service = await get_session_service(config)
        item = service.store.create_review_item(item_id, front, back)
        await service.flush()
        return item

    try:
        item = asyncio.run(run())
    except MemoraError as e:
        raise _fail(e) from None
    typer.echo(f"Added {_describe(item)}")


@app.command()
def due(
    ctx: typer.Context,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", min=1, help="Maximum items to list.")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON output.")] = False,
):
    """List items due for review, oldest-overdue first."""
    from memora.application.factory import get_session_service

    config = _config(ctx)

    try:
        service = asyncio.run(get_session_service(config))
    except MemoraError as e:
        raise _fail(e) from None

    queue = service.start_session(limit=limit or config.due_limit)

    if as_json:
        typer.echo(_to_json([dataclasses.asdict(item) for item in queue]))
        return
    if not queue:
        typer.secho("Nothing is due for review.", fg="green")
        return
    for item in queue:
        typer.echo(_describe(item))


@app.command()
def review(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item id.")],
    quality: Annotated[
        int | None, typer.Option("--quality", "-q", help="Raw quality score 0-5.")
    ] = None,
    correct: Annotated[bool, typer.Option("--correct", help="The answer was correct.")] = False,
    incorrect: Annotated[
        bool, typer.Option("--incorrect", help="The answer was wrong.")
    ] = False,
    confidence: Annotated[
        str | None, typer.Option(help="Confidence for a correct answer: low, medium, high.")
    ] = None,
    rating: Annotated[
        str | None, typer.Option(help="Self-rating: wrong, hard, good, easy.")
    ] = None,
    skip: Annotated[
        bool, typer.Option("--skip", help="No answer was given (timeout or skip).")
    ] = False,
):
    """Record one answer and reschedule the item."""
    from memora.application.factory import get_session_service

    chosen = [quality is not None, correct, incorrect, rating is not None, skip]
    if sum(chosen) != 1:
        typer.secho(
            "Give exactly one of --quality, --correct, --incorrect, --rating or --skip.",
            fg="yellow",
            err=True,
        )
        raise typer.Exit(2)
    if confidence is not None and not correct:
        typer.secho("--confidence only applies together with --correct.", fg="yellow", err=True)
        raise typer.Exit(2)

    config = _config(ctx)

    async def run() -> ReviewItem:
        service = await get_session_service(config)
        if quality is not None:
            return await service.answer(item_id, quality)
        if rating is not None:
            return await service.answer_rating(item_id, rating)
        return await service.answer_response(
            item_id, correct, confidence, answered=not skip
        )

    try:
        item = asyncio.run(run())
    except MemoraError as e:
        raise _fail(e) from None
    typer.echo(f"Reviewed (q={item.quality}) {_describe(item)}")


@app.command()
def stats(
    ctx: typer.Context,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON output.")] = False,
):
    """Show study statistics."""
    from memora.application.factory import get_stats_service

    config = _config(ctx)

    try:
        statistics = asyncio.run(get_stats_service(config).get_statistics())
    except MemoraError as e:
        raise _fail(e) from None

    data = dataclasses.asdict(statistics)
    if as_json:
        typer.echo(_to_json(data))
        return

    typer.echo(f"Reviews:        {statistics.total_reviews} ({statistics.correct_reviews} correct)")
    typer.echo(f"Accuracy:       {statistics.accuracy:.0%}")
    typer.echo(f"Avg quality:    {statistics.average_quality:.2f}")
    typer.echo(f"Study streak:   {statistics.study_streak} days")
    typer.echo(f"Mastered:       {statistics.mastered_items}/{statistics.total_items}")
    typer.echo(f"Learning:       {statistics.learning_items}")
    typer.echo(
        f"Due now:        {statistics.items_to_review} "
        f"(~{statistics.estimated_time:.1f} min, {statistics.overdue_items} overdue)"
    )


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Print the resolved configuration as JSON."""
    config = _config(ctx)
    typer.echo(_to_json(config.model_dump()))
