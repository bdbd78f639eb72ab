"""Cursor pagination shared by the timeline, review search and sake search.

A page is fetched as ``limit + 1`` rows ordered by a strictly monotonic key.
The extra row only tells us whether another page exists; the cursor handed
back is the key of the last row actually returned, encoded so that clients
treat it as opaque. Requests are stateless: every page re-runs the query with
a ``key < cursor`` (or ``>`` for ascending keys) predicate.
"""
import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import and_, or_

from app.constants import MAX_PAGE_SIZE
from app.errors import ValidationFailed
from app.models.types import format_timestamp, parse_timestamp

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    next_cursor: Optional[str]


def check_limit(limit: int) -> int:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationFailed(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return limit


def encode_cursor(*parts: Any) -> str:
    values = [format_timestamp(p) if isinstance(p, datetime) else p for p in parts]
    raw = json.dumps(values, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str, shape: Sequence[type]) -> Tuple:
    """Decode a cursor and check it has the key shape of the current query.

    ``shape`` lists the expected part types; ``datetime`` parts are parsed
    back from their string form.
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        values = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (ValueError, UnicodeError, binascii.Error):
        raise ValidationFailed("Invalid cursor")

    if not isinstance(values, list) or len(values) != len(shape):
        raise ValidationFailed("Invalid cursor")

    parts = []
    for value, kind in zip(values, shape):
        if kind is datetime:
            if not isinstance(value, str):
                raise ValidationFailed("Invalid cursor")
            try:
                value = parse_timestamp(value)
            except ValueError:
                raise ValidationFailed("Invalid cursor")
        elif kind is int:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationFailed("Invalid cursor")
        parts.append(value)
    return tuple(parts)


def after_desc(columns: Sequence, values: Sequence):
    """Rows strictly after ``values`` in descending lexicographic order of ``columns``."""
    clauses = []
    for i, (column, value) in enumerate(zip(columns, values)):
        equal_prefix = [c == v for c, v in zip(columns[:i], values[:i])]
        clauses.append(and_(*equal_prefix, column < value))
    return or_(*clauses)


def after_asc(columns: Sequence, values: Sequence):
    clauses = []
    for i, (column, value) in enumerate(zip(columns, values)):
        equal_prefix = [c == v for c, v in zip(columns[:i], values[:i])]
        clauses.append(and_(*equal_prefix, column > value))
    return or_(*clauses)


def paginate(query, limit: int, sort_key: Callable[[Any], Tuple]) -> Page:
    """Run an already filtered and ordered query as one page."""
    rows = query.limit(limit + 1).all()
    has_more = len(rows) > limit
    items = rows[:limit]
    next_cursor = encode_cursor(*sort_key(items[-1])) if has_more and items else None
    return Page(items=items, next_cursor=next_cursor)


def merge_pages(streams: Sequence[Sequence[T]], limit: int, sort_key: Callable[[T], Tuple]) -> Page[T]:
    """Merge independently fetched descending streams into one page.

    Each stream must have been fetched with the same cursor and ``limit + 1``
    rows. Items beyond ``limit`` are dropped here and picked up again by the
    next request, which re-queries every stream from the returned cursor.
    """
    merged = sorted((item for stream in streams for item in stream), key=sort_key, reverse=True)
    items = merged[:limit]
    next_cursor = encode_cursor(*sort_key(items[-1])) if len(merged) > limit else None
    return Page(items=items, next_cursor=next_cursor)
