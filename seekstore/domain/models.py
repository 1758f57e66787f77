"""
Domain models for seekstore.

Defines the record schemas aligned with `seekstore/infrastructure/schema.py`.
Association fields are only filled by explicit eager-load calls on the
accessor and are never written back to the store.
"""
from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from seekstore.domain.validation import FieldConstraint

# Upper bound of a LONGTEXT column (2**32 - 1 characters).
TEXT_MAX_LENGTH = 4294967295


class Record(BaseModel):
    """
    Fields every persisted kind carries. An id of 0 means "not persisted yet".
    """

    id: int = Field(0, ge=0, description="Surrogate key assigned by the store.")
    created_at: Optional[datetime] = Field(None, description="Row creation timestamp.")
    updated_at: Optional[datetime] = Field(None, description="Row update timestamp.")

    constraints: ClassVar[Dict[str, FieldConstraint]] = {}

    model_config = {
        "populate_by_name": True,
        "validate_assignment": False,
    }


class Article(Record):
    """
    Representation of a single row in the `articles` table.
    """

    title: str = Field("", description="Headline, 10 to 30 characters.")
    text: str = Field("", description="Body, at least 20 characters.")
    comments: List["Comment"] = Field(default_factory=list)

    constraints: ClassVar[Dict[str, FieldConstraint]] = {
        "title": FieldConstraint(required=True, min_length=10, max_length=30),
        "text": FieldConstraint(required=True, min_length=20, max_length=TEXT_MAX_LENGTH),
    }


class Comment(Record):
    """
    Representation of a single row in the `comments` table.
    """

    commenter: str = Field("", description="Display name of the author.")
    body: str = Field("", description="Comment text, at least 20 characters.")
    article_id: int = Field(0, ge=0, description="Owning article.")
    article: Optional[Article] = None

    constraints: ClassVar[Dict[str, FieldConstraint]] = {
        "commenter": FieldConstraint(required=True),
        "body": FieldConstraint(required=True, min_length=20, max_length=TEXT_MAX_LENGTH),
    }


Article.model_rebuild()
Comment.model_rebuild()


__all__ = ["Record", "Article", "Comment", "TEXT_MAX_LENGTH"]
