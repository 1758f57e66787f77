from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from seekstore.config import get_settings
from seekstore.domain.kinds import ARTICLE
from seekstore.errors import NoNextPageError, NoPreviousPageError, SeekStoreError
from seekstore.infrastructure.db_factory import get_executor, get_sync_connection
from seekstore.infrastructure.schema import apply_schema
from seekstore.persistence.accessor import RecordAccessor
from seekstore.persistence.pager import KeysetPager, Page, PageDirection
from seekstore.utils.logging import configure_logging

app = typer.Typer(help="seekstore CLI: browse and manage articles with keyset pagination.")

_KEYS = {"n": PageDirection.NEXT, "p": PageDirection.PREVIOUS, "c": PageDirection.CURRENT}


def _setup(dsn: Optional[str]) -> RecordAccessor:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return RecordAccessor(ARTICLE, get_executor(dsn))


def _echo_page(page: Page) -> None:
    typer.echo(
        f"-- page {page.index + 1}/{page.total_pages} "
        f"({page.total_items} articles, ids {page.first_id}..{page.last_id})"
    )
    for article in page.items:
        typer.echo(f"{article.id:>6}  {article.title}")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool=({settings.db_pool_min},{settings.db_pool_max}) "
        f"page_size={settings.default_page_size} env={settings.app_env}"
    )


@app.command("init-db")
def init_db(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override."),
) -> None:
    """
    Create the articles and comments tables.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    with get_sync_connection(dsn) as conn:
        apply_schema(conn, drop_first=drop)
    typer.echo("Schema ready.")


@app.command()
def browse(
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", help="Rows per page."),
    desc: bool = typer.Option(False, "--desc", help="Newest first (id descending)."),
    where: str = typer.Option("", "--where", help="Trusted SQL filter, e.g. \"title LIKE 'A%%'\"."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override."),
) -> None:
    """
    Walk articles page by page: [n]ext, [p]revious, [c]urrent, [q]uit.
    """
    articles = _setup(dsn)
    size = page_size or get_settings().default_page_size
    pager = KeysetPager(
        articles, order=[("id", "desc" if desc else "asc")], where=where, page_size=size
    )
    try:
        _echo_page(pager.current())
    except SeekStoreError as exc:
        typer.echo(f"Browse articles error: {exc}", err=True)
        raise typer.Exit(code=1)
    while True:
        choice = typer.prompt("[n]ext [p]revious [c]urrent [q]uit", default="n").strip().lower()
        if choice.startswith("q"):
            return
        direction = _KEYS.get(choice[:1])
        if direction is None:
            typer.echo(f"Unknown choice {choice!r}")
            continue
        try:
            _echo_page(pager.page(direction))
        except (NoNextPageError, NoPreviousPageError) as exc:
            typer.echo(str(exc))
        except SeekStoreError as exc:
            typer.echo(f"Browse articles error: {exc}", err=True)


@app.command()
def show(
    article_id: int = typer.Argument(..., help="Article id."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override."),
) -> None:
    """
    Print one article with its comments as JSON.
    """
    articles = _setup(dsn)
    try:
        article = articles.load_association(articles.find_by_id(article_id), "comments")
    except SeekStoreError as exc:
        typer.echo(f"Get article error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(article.model_dump_json(indent=2))


@app.command()
def destroy(
    article_id: int = typer.Argument(..., help="Article id."),
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override."),
) -> None:
    """
    Delete an article and, best effort, its comments.
    """
    articles = _setup(dsn)
    try:
        result = articles.destroy_by_id(article_id)
    except SeekStoreError as exc:
        typer.echo(f"Destroy article error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(
        json.dumps(
            {
                "deleted": result.deleted,
                "cascade": result.cascade.deleted,
                "failures": [f.error for f in result.cascade.failures],
            },
            indent=2,
        )
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
