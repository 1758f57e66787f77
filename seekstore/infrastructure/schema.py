"""
PostgreSQL DDL for the shipped record kinds.

`comments.article_id` carries no foreign-key constraint: dependent rows are
removed by the cascade coordinator, not by the database.
"""

from __future__ import annotations

from psycopg import Connection

from seekstore.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS articles (
    id         BIGSERIAL PRIMARY KEY,
    title      VARCHAR(255) NOT NULL DEFAULT '',
    text       TEXT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);

CREATE TABLE IF NOT EXISTS comments (
    id         BIGSERIAL PRIMARY KEY,
    commenter  VARCHAR(255) NOT NULL DEFAULT '',
    body       TEXT,
    article_id BIGINT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_comments_article_id ON comments (article_id);
"""

DROP_SQL = "DROP TABLE IF EXISTS comments; DROP TABLE IF EXISTS articles;"


def apply_schema(conn: Connection, drop_first: bool = False) -> None:
    """Create the tables (optionally dropping them first) and commit."""
    with conn.cursor() as cur:
        if drop_first:
            cur.execute(DROP_SQL)
        cur.execute(SCHEMA_SQL)
    conn.commit()
    log.info("Schema applied", extra={"drop_first": drop_first})


__all__ = ["SCHEMA_SQL", "DROP_SQL", "apply_schema"]
