"""
Data generation script for seekstore.

Seeds deterministic pseudo-random articles, each with a number of comments,
through the accessor's attribute-map create path.
"""

from __future__ import annotations

import random
import sys
import time
from typing import Any, Dict, Iterator, List

import typer

from seekstore.domain.kinds import ARTICLE
from seekstore.infrastructure.db_factory import get_executor
from seekstore.infrastructure.executor import StoreExecutor
from seekstore.persistence.accessor import RecordAccessor

app = typer.Typer(help="Generate synthetic articles and comments.")

_WORDS = [
    "keyset", "cursor", "index", "postgres", "latency", "page", "boundary",
    "filter", "ordering", "cascade", "comment", "article", "snapshot", "seek",
]
_COMMENTERS = ["alice", "bob", "carol", "dave", "erin", "frank"]


def _sentence(rng: random.Random, min_len: int, max_len: int) -> str:
    words: List[str] = []
    while len(" ".join(words)) < min_len:
        words.append(rng.choice(_WORDS))
    return " ".join(words)[:max_len].strip().capitalize()


def _generate_rows(
    rows: int, comments_per_article: int, seed: int
) -> Iterator[tuple[Dict[str, Any], List[Dict[str, Any]]]]:
    """Yield (article attributes, [comment attributes]) pairs."""
    rng = random.Random(seed)
    for _ in range(rows):
        article = {
            "title": _sentence(rng, 10, 30).ljust(10, "."),
            "text": _sentence(rng, 40, 400),
        }
        comments = [
            {"commenter": rng.choice(_COMMENTERS), "body": _sentence(rng, 20, 200)}
            for _ in range(comments_per_article)
        ]
        yield article, comments


def seed_articles(
    executor: StoreExecutor, rows: int, comments_per_article: int = 3, seed: int = 42
) -> List[int]:
    """Insert the generated rows and return the new article ids."""
    articles = RecordAccessor(ARTICLE, executor)
    ids: List[int] = []
    for article_attrs, comment_attrs in _generate_rows(rows, comments_per_article, seed):
        article_id = articles.create_from_map(article_attrs)
        article = articles.kind.model(id=article_id)
        for attrs in comment_attrs:
            articles.create_associated(article, "comments", attrs)
        ids.append(article_id)
    return ids


@app.command()
def main(
    rows: int = typer.Option(
        100,
        "--rows",
        "-r",
        help="Number of articles to generate.",
    ),
    comments: int = typer.Option(
        3,
        "--comments",
        "-c",
        help="Comments per article.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Generate synthetic articles with comments and insert them.
    """
    start = time.perf_counter()
    typer.echo(f"Seeding {rows:,} articles x {comments} comments (seed={seed})")
    ids = seed_articles(get_executor(dsn), rows=rows, comments_per_article=comments, seed=seed)
    duration = time.perf_counter() - start
    typer.echo(
        f"Inserted {len(ids):,} articles in {duration:.2f}s "
        f"(ids {ids[0] if ids else '-'}..{ids[-1] if ids else '-'})"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
