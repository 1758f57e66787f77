from __future__ import annotations

import pytest

from seekstore.domain.models import Article, Comment
from seekstore.domain.validation import FieldConstraint, validate
from seekstore.errors import ValidationError

VALID_TEXT = "This body is comfortably over twenty characters."


def test_valid_article_has_no_violations() -> None:
    assert validate(Article(title="A perfectly fine title", text=VALID_TEXT)) == []


@pytest.mark.parametrize(
    "title",
    ["short", "x" * 31],
)
def test_title_length_bounds(title: str) -> None:
    violations = validate(Article(title=title, text=VALID_TEXT))
    assert [v.field for v in violations] == ["title"]
    assert "length(10|30)" in violations[0].message


def test_title_length_bounds_are_inclusive() -> None:
    assert validate(Article(title="x" * 10, text=VALID_TEXT)) == []
    assert validate(Article(title="x" * 30, text=VALID_TEXT)) == []


def test_violations_are_aggregated_in_table_order() -> None:
    violations = validate(Article(title="", text="too short"))
    assert [v.field for v in violations] == ["title", "text"]
    assert violations[0].message == "non zero value required"


def test_comment_requires_commenter() -> None:
    violations = validate(Comment(commenter="", body=VALID_TEXT, article_id=1))
    assert [str(v) for v in violations] == ["commenter: non zero value required"]


def test_validation_error_message_lists_violations() -> None:
    error = ValidationError("Article", validate(Article(title="short", text=VALID_TEXT)))
    assert str(error).startswith("Validate Article error: title:")
    assert len(error.violations) == 1


def test_constraint_description() -> None:
    assert FieldConstraint(required=True, min_length=10, max_length=30).describe() == "length(10|30)"
    assert FieldConstraint(required=True).describe() == "required"
