from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app import crud
from app.auth import ensure_owner, require_caller_id
from app.constants import DEFAULT_PAGE_SIZE
from app.database import get_db
from app.errors import Forbidden
from app.logger import get_logger
from app.models.brewery import Brewery
from app.models.sake import Review, Sake
from app.models.types import format_timestamp
from app.pagination import after_asc, check_limit, decode_cursor, paginate
from app.schemas.reviews import ReviewIn
from app.schemas.sakes import Category, SakeIn, sake_out, sake_search_item
from app.services.discord import Notifier, ReviewPosted, dispatch, get_notifier

logger = get_logger("routes.sakes")

router = APIRouter()


@router.get("")
def search_sakes(
    q: Optional[str] = None,
    category: Optional[Category] = None,
    isLimited: bool = False,
    hasPaidTasting: bool = False,
    cursor: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """Search sakes by name or brewery name, paged by sake id ascending."""
    check_limit(limit)

    query = db.query(Sake, Brewery.name.label("brewery_name")).join(Brewery, Brewery.id == Sake.brewery_id)

    text = (q or "").strip()
    if text:
        query = query.filter(
            or_(
                Sake.name.contains(text, autoescape=True),
                Brewery.name.contains(text, autoescape=True),
            )
        )
    if category:
        query = query.filter(Sake.category == category)
    if isLimited:
        query = query.filter(Sake.is_limited.is_(True))
    if hasPaidTasting:
        query = query.filter(Sake.paid_tasting_price.isnot(None))
    if cursor:
        (last_id,) = decode_cursor(cursor, (int,))
        query = query.filter(after_asc([Sake.id], [last_id]))

    page = paginate(query.order_by(Sake.id.asc()), limit, lambda row: (row.Sake.id,))
    return {
        "items": [sake_search_item(row) for row in page.items],
        "nextCursor": page.next_cursor,
    }


@router.get("/{sake_id}")
def get_sake(sake_id: int, db: Session = Depends(get_db)):
    sake = crud.get_sake_or_404(db, sake_id)
    brewery = crud.get_brewery_or_404(db, sake.brewery_id)

    record = sake_out(sake)
    record["brewery"] = {"breweryId": brewery.id, "name": brewery.name}
    record["averageRating"] = crud.average_rating_for_sake(db, sake.id)
    record["reviews"] = crud.reviews_by_sake(db, [sake.id])[sake.id]
    return record


@router.put("/{sake_id}")
def update_sake(
    sake_id: int,
    payload: SakeIn,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    """Edit a user-added sake. Seed sakes cannot be edited."""
    sake = crud.get_sake_or_404(db, sake_id)
    crud.get_user_or_404(db, caller_id)

    if not sake.is_custom:
        logger.warning(f"User {caller_id} tried to edit seed sake {sake.id}")
        raise Forbidden("Only user-added sakes can be edited")

    sake.name = payload.name
    sake.type = payload.type
    sake.category = payload.category
    sake.is_limited = payload.isLimited
    sake.paid_tasting_price = payload.paidTastingPrice
    db.commit()
    db.refresh(sake)
    logger.info(f"User {caller_id} edited sake {sake.id}")
    return sake_out(sake)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


def _review_response(review: Review) -> dict:
    return {
        "reviewId": review.id,
        "userId": review.user_id,
        "sakeId": review.sake_id,
        "rating": review.rating,
        "tags": list(review.tags or []),
        "comment": review.comment,
        "createdAt": format_timestamp(review.created_at),
    }


@router.post("/{sake_id}/reviews", status_code=status.HTTP_201_CREATED)
def create_review(
    sake_id: int,
    payload: ReviewIn,
    background_tasks: BackgroundTasks,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    user = crud.get_user_or_404(db, caller_id)
    sake = crud.get_sake_or_404(db, sake_id)
    brewery = crud.get_brewery_or_404(db, sake.brewery_id)

    review = Review(
        user_id=user.id,
        sake_id=sake.id,
        rating=payload.rating,
        tags=payload.tags,
        comment=payload.comment,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    logger.info(f"User {user.id} reviewed sake {sake.id} with {review.rating}/5")

    background_tasks.add_task(
        dispatch,
        notifier,
        ReviewPosted(
            user_name=user.name,
            brewery_id=brewery.id,
            brewery_name=brewery.name,
            sake_name=sake.name,
            rating=review.rating,
            tags=tuple(review.tags or ()),
            comment=review.comment,
        ),
    )
    return _review_response(review)


@router.put("/{sake_id}/reviews/{review_id}")
def update_review(
    sake_id: int,
    review_id: int,
    payload: ReviewIn,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    review = crud.get_review_or_404(db, review_id, sake_id=sake_id)
    ensure_owner(review.user_id, caller_id, "review")

    review.rating = payload.rating
    review.tags = payload.tags
    review.comment = payload.comment
    db.commit()
    db.refresh(review)
    logger.info(f"User {caller_id} edited review {review.id}")
    return _review_response(review)


@router.delete("/{sake_id}/reviews/{review_id}")
def delete_review(
    sake_id: int,
    review_id: int,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    review = crud.get_review_or_404(db, review_id, sake_id=sake_id)
    ensure_owner(review.user_id, caller_id, "review")

    db.delete(review)
    db.commit()
    logger.info(f"User {caller_id} deleted review {review_id}")
    return {"success": True}
