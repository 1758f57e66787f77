"""
Domain package for seekstore.

Exports the record models, the record kinds built on them, and the
validation gate. Keep this package free of SQL execution.
"""

from seekstore.domain.kinds import ARTICLE, COMMENT, RecordKind
from seekstore.domain.models import Article, Comment, Record
from seekstore.domain.validation import FieldConstraint, FieldViolation, validate

__all__ = [
    "Record",
    "Article",
    "Comment",
    "RecordKind",
    "ARTICLE",
    "COMMENT",
    "FieldConstraint",
    "FieldViolation",
    "validate",
]
