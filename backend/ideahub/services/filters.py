"""Predicates shared by the topic and idea services."""

from collections.abc import Sequence

from sqlalchemy import ColumnElement, or_, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession


def text_search(model, search: str | None) -> ColumnElement[bool] | None:
    """Case-insensitive substring match on ``name`` OR ``description``."""
    if not search:
        return None
    return or_(
        model.name.icontains(search, autoescape=True),
        model.description.icontains(search, autoescape=True),
    )


def supports_tag_containment(db: AsyncSession) -> bool:
    return db.get_bind().dialect.name == "postgresql"


def tags_contain(model, tags: Sequence[str]) -> ColumnElement[bool]:
    """``tags @> :tags`` on JSONB columns."""
    return type_coerce(model.tags, JSONB).contains(list(tags))


def filter_by_tags(rows: Sequence, tags: Sequence[str]) -> list:
    """In-process equivalent of :func:`tags_contain` for backends without JSONB."""
    wanted = set(tags)
    return [row for row in rows if wanted.issubset(row.tags or [])]
