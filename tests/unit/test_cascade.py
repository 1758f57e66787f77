from __future__ import annotations

import pytest

from seekstore.domain.kinds import ARTICLE, COMMENT
from seekstore.errors import NotFoundError
from seekstore.persistence.accessor import RecordAccessor
from seekstore.persistence.cascade import Association, AssociationRegistry

BODY = "A comment body that is long enough."


def _article_with_comments(articles, comments, count: int) -> int:
    article_id = articles.create_from_map({"title": "Parent article", "text": BODY})
    for n in range(count):
        comments.create_from_map({"commenter": f"user{n}", "body": BODY, "article_id": article_id})
    return article_id


def test_destroy_parent_removes_children(articles, comments, executor) -> None:
    for _ in range(6):
        articles.create_from_map({"title": "Filler article", "text": BODY})
    article_id = _article_with_comments(articles, comments, 3)
    assert article_id == 7
    other_id = _article_with_comments(articles, comments, 1)

    result = articles.destroy_by_id(article_id)

    assert result.deleted == 1
    assert result.cascade.ok
    assert result.cascade.deleted == {"comments": 3}
    assert comments.count_where("article_id = %s", article_id) == 0
    assert comments.count_where("article_id = %s", other_id) == 1
    with pytest.raises(NotFoundError):
        articles.find_by_id(article_id)


def test_child_failure_is_logged_and_parent_still_removed(
    articles, comments, executor, caplog
) -> None:
    article_id = _article_with_comments(articles, comments, 3)
    executor.fail_when = lambda sql: sql.startswith("DELETE FROM comments")

    with caplog.at_level("WARNING"):
        result = articles.destroy_by_id(article_id)

    assert result.deleted == 1
    assert not result.cascade.ok
    assert [f.association for f in result.cascade.failures] == ["comments"]
    assert "simulated store failure" in result.cascade.failures[0].error
    assert any("Destroy associated object comments error" in m for m in caplog.messages)
    assert articles.count_where("id = %s", article_id) == 0
    # best effort: the orphans stay behind
    assert executor.row_count("comments") == 3


def test_destroy_where_cascades_for_every_matched_parent(articles, comments) -> None:
    first = _article_with_comments(articles, comments, 2)
    second = _article_with_comments(articles, comments, 2)
    keep = _article_with_comments(articles, comments, 1)

    result = articles.destroy_where("id IN (%s, %s)", first, second)

    assert result.deleted == 2
    assert result.cascade.parent_ids == (first, second)
    assert result.cascade.deleted == {"comments": 4}
    assert comments.ids_where() == comments.ids_where("article_id = %s", keep)


def test_destroy_where_with_no_match_skips_children(articles, comments, executor) -> None:
    _article_with_comments(articles, comments, 2)
    executor.statements.clear()

    result = articles.destroy_where("id = %s", 999)

    assert result.deleted == 0
    assert result.cascade.results == []
    assert not any(sql.startswith("DELETE FROM comments") for sql in executor.writes())


def test_id_resolution_failure_still_deletes_parent(articles, comments, executor) -> None:
    article_id = _article_with_comments(articles, comments, 1)
    executor.fail_when = lambda sql: sql.startswith("SELECT id FROM articles")

    result = articles.destroy_where("id = %s", article_id)

    assert result.deleted == 1
    assert result.cascade.resolution_error is not None
    assert not result.cascade.ok


def test_comment_destroy_has_no_children(comments, articles) -> None:
    _article_with_comments(articles, comments, 2)
    result = comments.destroy_by_id(1)
    assert result.deleted == 1
    assert result.cascade.results == []


def test_custom_registry_without_associations(executor) -> None:
    articles = RecordAccessor(ARTICLE, executor, associations=AssociationRegistry())
    comments = RecordAccessor(COMMENT, executor)
    article_id = _article_with_comments(articles, comments, 2)

    articles.destroy_by_id(article_id)

    assert comments.count() == 2


def test_registry_rejects_unknown_foreign_key() -> None:
    with pytest.raises(ValueError):
        AssociationRegistry([Association(ARTICLE, COMMENT, "post_id", "comments")])
