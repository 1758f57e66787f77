from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from seekstore import main as cli

runner = CliRunner()

BODY = "A comment body that is long enough."


@pytest.fixture
def wired(monkeypatch, executor):
    monkeypatch.setattr(cli, "get_executor", lambda dsn=None: executor)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    return executor


def test_info_prints_settings() -> None:
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 0
    assert "page_size=" in result.output


def test_show_prints_article_with_comments(wired, articles, comments, seed) -> None:
    (article_id,) = seed(1)
    comments.create_from_map({"commenter": "alice", "body": BODY, "article_id": article_id})

    result = runner.invoke(cli.app, ["show", str(article_id)])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["id"] == article_id
    assert [c["commenter"] for c in payload["comments"]] == ["alice"]


def test_show_missing_article_exits_nonzero(wired) -> None:
    result = runner.invoke(cli.app, ["show", "42"])
    assert result.exit_code == 1


def test_destroy_reports_cascade(wired, articles, comments, seed) -> None:
    (article_id,) = seed(1)
    for name in ("alice", "bob"):
        comments.create_from_map({"commenter": name, "body": BODY, "article_id": article_id})

    result = runner.invoke(cli.app, ["destroy", str(article_id)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"deleted": 1, "cascade": {"comments": 2}, "failures": []}


def test_browse_walks_pages(wired, seed) -> None:
    seed(12)
    result = runner.invoke(cli.app, ["browse", "--page-size", "5"], input="n\nn\nn\np\nq\n")

    assert result.exit_code == 0
    assert "-- page 1/3" in result.output
    assert "-- page 3/3" in result.output
    assert "no next page" in result.output


def test_browse_survives_store_failure(wired, seed) -> None:
    seed(12)
    row_fetches: list[str] = []

    def _fail_after_first_page(sql: str) -> bool:
        if sql.startswith("SELECT articles.id"):
            row_fetches.append(sql)
            return len(row_fetches) > 1
        return False

    wired.fail_when = _fail_after_first_page
    result = runner.invoke(cli.app, ["browse", "--page-size", "5"], input="n\nq\n")

    assert result.exit_code == 0
    assert "-- page 1/3" in result.output
    assert "Browse articles error: simulated store failure" in result.output


def test_browse_first_page_failure_exits_nonzero(wired) -> None:
    wired.fail_when = lambda sql: sql.startswith("SELECT")
    result = runner.invoke(cli.app, ["browse"])
    assert result.exit_code == 1
