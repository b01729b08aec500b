"""
Feed query specs.

A ``FeedQuery`` is a plain description of a posts query (a tagged list of
filters plus viewer and paging) that is compiled into SQLAlchemy in one
place. Compilation always adds the scheduled-post visibility rule, so every
feed built from a spec hides other users' unpublished posts.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from app.db.types import array_contains
from app.modules.posts.models.post import Post

EQ = "eq"
IN = "in"
CONTAINS = "contains"
GTE = "gte"

_OPERATORS = {EQ, IN, CONTAINS, GTE}
_COLUMNS = {"id", "user_id", "mentions", "topics", "created_at"}
_ARRAY_COLUMNS = {"mentions", "topics"}


@dataclass(frozen=True)
class Filter:
    op: str
    column: str
    value: Any

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"Unknown filter operator: {self.op}")
        if self.column not in _COLUMNS:
            raise ValueError(f"Unknown filter column: {self.column}")
        if self.op == CONTAINS and self.column not in _ARRAY_COLUMNS:
            raise ValueError(f"'contains' needs an array column, got {self.column}")


@dataclass
class FeedQuery:
    viewer_id: Optional[str] = None
    filters: List[Filter] = field(default_factory=list)
    skip: int = 0
    limit: Optional[int] = None

    def where(self, op: str, column: str, value: Any) -> "FeedQuery":
        self.filters.append(Filter(op, column, value))
        return self


def visibility_clause(viewer_id: Optional[str], now: Optional[datetime] = None):
    """Published posts, plus the viewer's own scheduled ones"""
    now = now or datetime.utcnow()
    clauses = [Post.scheduled_at.is_(None), Post.scheduled_at <= now]
    if viewer_id:
        clauses.append(Post.user_id == viewer_id)
    return or_(*clauses)


def _compile_filter(flt: Filter, dialect_name: str):
    column = getattr(Post, flt.column)
    if flt.op == EQ:
        return column == flt.value
    if flt.op == IN:
        return column.in_(list(flt.value))
    if flt.op == GTE:
        return column >= flt.value
    return array_contains(column, flt.value, dialect_name)


def compile_feed_query(db: Session, spec: FeedQuery, now: Optional[datetime] = None) -> Query:
    """SQLAlchemy query for spec, newest first, without paging applied"""
    dialect_name = db.get_bind().dialect.name
    query = db.query(Post).filter(visibility_clause(spec.viewer_id, now))
    for flt in spec.filters:
        query = query.filter(_compile_filter(flt, dialect_name))
    return query.order_by(Post.created_at.desc())
