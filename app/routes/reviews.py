from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.constants import DEFAULT_PAGE_SIZE
from app.database import get_db
from app.errors import NotFound, ValidationFailed
from app.models.brewery import Brewery
from app.models.sake import Review, Sake
from app.models.types import tag_pattern
from app.models.user import User
from app.pagination import after_desc, check_limit, decode_cursor, paginate
from app.schemas.reviews import check_tags, review_search_item

router = APIRouter()


def joined_reviews(db: Session):
    return (
        db.query(
            Review,
            User.name.label("user_name"),
            Sake.name.label("sake_name"),
            Sake.type.label("sake_type"),
            Sake.is_limited.label("is_limited"),
            Sake.paid_tasting_price.label("paid_tasting_price"),
            Brewery.id.label("brewery_id"),
            Brewery.name.label("brewery_name"),
        )
        .join(User, User.id == Review.user_id)
        .join(Sake, Sake.id == Review.sake_id)
        .join(Brewery, Brewery.id == Sake.brewery_id)
    )


def parse_tag_filter(tags: Optional[str]):
    if not tags:
        return []
    requested = [tag.strip() for tag in tags.split(",") if tag.strip()]
    try:
        return check_tags(requested)
    except ValueError as e:
        raise ValidationFailed(str(e))


@router.get("")
def search_reviews(
    sort: Literal["latest", "rating"] = "latest",
    tags: Optional[str] = None,
    userId: Optional[str] = None,
    cursor: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """Search reviews.

    ``tags`` is comma separated and every listed tag must be present.
    ``latest`` pages by (createdAt, id); ``rating`` by (rating, createdAt, id),
    both descending.
    """
    check_limit(limit)
    tag_filter = parse_tag_filter(tags)

    query = joined_reviews(db)
    if userId:
        query = query.filter(Review.user_id == userId)
    for tag in tag_filter:
        query = query.filter(Review.tags.like(tag_pattern(tag)))

    if sort == "rating":
        columns = [Review.rating, Review.created_at, Review.id]
        shape = (int, datetime, int)
        sort_key = lambda row: (row.Review.rating, row.Review.created_at, row.Review.id)
    else:
        columns = [Review.created_at, Review.id]
        shape = (datetime, int)
        sort_key = lambda row: (row.Review.created_at, row.Review.id)

    if cursor:
        query = query.filter(after_desc(columns, decode_cursor(cursor, shape)))

    page = paginate(query.order_by(*[column.desc() for column in columns]), limit, sort_key)
    return {
        "items": [review_search_item(row) for row in page.items],
        "nextCursor": page.next_cursor,
    }


@router.get("/{review_id}")
def get_review(review_id: int, db: Session = Depends(get_db)):
    row = joined_reviews(db).filter(Review.id == review_id).first()
    if not row:
        raise NotFound("Review not found")
    return review_search_item(row)
