"""
Batch matching from the command line.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from loguru import logger
from sqlalchemy.orm import Session

from jobboard.bootstrap import run_bootstrap
from jobboard.config import settings
from jobboard.database import Base, SessionLocal, engine
from jobboard.errors import MatchingError
from jobboard.logging_config import setup_logging
from jobboard.models import application, cv, job, match, student_profile, user  # noqa: F401
from jobboard.services.matching import MatchingService, ScoringStrategy

T = TypeVar("T")


def _run(coro_factory: Callable[[Session], Awaitable[T]]) -> T:
    db = SessionLocal()
    try:
        return asyncio.run(coro_factory(db))
    except MatchingError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        db.close()


@click.group()
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([strategy.value for strategy in ScoringStrategy]),
    default=None,
    help="Override SCORING_STRATEGY for this run",
)
@click.pass_context
def main(ctx: click.Context, strategy: str | None) -> None:
    """Job board matching - score CVs against open jobs."""
    setup_logging(settings)
    settings.ensure_directories()
    Base.metadata.create_all(bind=engine)
    run_bootstrap(engine, settings)
    if strategy:
        settings.scoring_strategy = strategy
    ctx.obj = MatchingService.from_settings(settings)


@main.command("cv")
@click.argument("cv_id", type=int)
@click.pass_obj
def match_cv(service: MatchingService, cv_id: int) -> None:
    """Match one CV against all open jobs."""
    summary = _run(lambda db: service.match_cv(db, cv_id))
    click.echo(f"Created: {summary.created}, Updated: {summary.updated}, Failed: {summary.failed}")


@main.command("job")
@click.argument("job_id", type=int)
@click.pass_obj
def match_job(service: MatchingService, job_id: int) -> None:
    """Match one job against every student's active CV."""
    summary = _run(lambda db: service.match_job(db, job_id))
    click.echo(f"Created: {summary.created}, Updated: {summary.updated}, Failed: {summary.failed}")


@main.command("all")
@click.option("--limit", "-l", type=int, default=None, help="Maximum CVs to process")
@click.pass_obj
def rescore_all(service: MatchingService, limit: int | None) -> None:
    """Rerun matching for the most recent active CVs."""
    processed, summary = _run(lambda db: service.rescore_all(db, limit=limit))
    logger.info(f"Processed {processed} CVs")
    click.echo(
        f"CVs: {processed}, Created: {summary.created}, Updated: {summary.updated}, Failed: {summary.failed}"
    )


if __name__ == "__main__":
    main()
