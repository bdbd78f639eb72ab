from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Integer, literal
from sqlalchemy.orm import Session

from app.constants import DEFAULT_PAGE_SIZE
from app.database import get_db
from app.models.brewery import Brewery, BreweryNote
from app.models.sake import Review, Sake
from app.models.types import format_timestamp
from app.models.user import User
from app.pagination import after_desc, check_limit, decode_cursor, merge_pages
from app.schemas.timeline import TimelineNoteItem, TimelinePage, TimelineReviewItem

router = APIRouter()

# At equal timestamps reviews sort before brewery notes.
REVIEW_RANK = 1
NOTE_RANK = 0

CURSOR_SHAPE = (datetime, int, int)


@dataclass(frozen=True)
class ReviewEntry:
    id: int
    created_at: datetime
    user_name: str
    brewery_id: int
    brewery_name: str
    sake_id: int
    sake_name: str
    rating: int
    tags: tuple
    comment: Optional[str]
    is_limited: bool
    paid_tasting_price: Optional[int]

    rank = REVIEW_RANK


@dataclass(frozen=True)
class NoteEntry:
    id: int
    created_at: datetime
    user_name: str
    brewery_id: int
    brewery_name: str
    content: str

    rank = NOTE_RANK


Entry = Union[ReviewEntry, NoteEntry]


def sort_key(entry: Entry):
    return (entry.created_at, entry.rank, entry.id)


def fetch_reviews(db: Session, cursor, size: int) -> List[ReviewEntry]:
    query = (
        db.query(Review, User.name, Sake, Brewery.name)
        .join(User, User.id == Review.user_id)
        .join(Sake, Sake.id == Review.sake_id)
        .join(Brewery, Brewery.id == Sake.brewery_id)
    )
    if cursor:
        columns = [Review.created_at, literal(REVIEW_RANK, Integer), Review.id]
        query = query.filter(after_desc(columns, cursor))
    rows = query.order_by(Review.created_at.desc(), Review.id.desc()).limit(size).all()
    return [
        ReviewEntry(
            id=review.id,
            created_at=review.created_at,
            user_name=user_name,
            brewery_id=sake.brewery_id,
            brewery_name=brewery_name,
            sake_id=sake.id,
            sake_name=sake.name,
            rating=review.rating,
            tags=tuple(review.tags or ()),
            comment=review.comment,
            is_limited=sake.is_limited,
            paid_tasting_price=sake.paid_tasting_price,
        )
        for review, user_name, sake, brewery_name in rows
    ]


def fetch_notes(db: Session, cursor, size: int) -> List[NoteEntry]:
    query = (
        db.query(BreweryNote, User.name, Brewery.name)
        .join(User, User.id == BreweryNote.user_id)
        .join(Brewery, Brewery.id == BreweryNote.brewery_id)
    )
    if cursor:
        columns = [BreweryNote.created_at, literal(NOTE_RANK, Integer), BreweryNote.id]
        query = query.filter(after_desc(columns, cursor))
    rows = query.order_by(BreweryNote.created_at.desc(), BreweryNote.id.desc()).limit(size).all()
    return [
        NoteEntry(
            id=note.id,
            created_at=note.created_at,
            user_name=user_name,
            brewery_id=note.brewery_id,
            brewery_name=brewery_name,
            content=note.comment,
        )
        for note, user_name, brewery_name in rows
    ]


def to_item(entry: Entry):
    if isinstance(entry, ReviewEntry):
        return TimelineReviewItem(
            id=entry.id,
            userName=entry.user_name,
            createdAt=format_timestamp(entry.created_at),
            breweryId=entry.brewery_id,
            breweryName=entry.brewery_name,
            sakeId=entry.sake_id,
            sakeName=entry.sake_name,
            rating=entry.rating,
            tags=list(entry.tags),
            comment=entry.comment,
            isLimited=entry.is_limited,
            paidTastingPrice=entry.paid_tasting_price,
        )
    if isinstance(entry, NoteEntry):
        return TimelineNoteItem(
            id=entry.id,
            userName=entry.user_name,
            createdAt=format_timestamp(entry.created_at),
            breweryId=entry.brewery_id,
            breweryName=entry.brewery_name,
            content=entry.content,
        )
    raise TypeError(f"Unknown timeline entry: {type(entry).__name__}")


@router.get("", response_model=TimelinePage)
def get_timeline(
    cursor: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """Reviews and brewery notes merged newest first.

    Both streams are re-queried from the cursor on every request, each with
    ``limit + 1`` rows, and the merge decides the page and the next cursor.
    """
    check_limit(limit)
    position = decode_cursor(cursor, CURSOR_SHAPE) if cursor else None

    page = merge_pages(
        [fetch_reviews(db, position, limit + 1), fetch_notes(db, position, limit + 1)],
        limit,
        sort_key,
    )
    return TimelinePage(items=[to_item(entry) for entry in page.items], nextCursor=page.next_cursor)
