from typing import Dict, Iterable, List, Optional

from sqlalchemy import Float, cast, func, select
from sqlalchemy.orm import Session

from app.errors import NotFound
from app.logger import get_logger
from app.models.brewery import Brewery, BreweryNote
from app.models.sake import Review, Sake
from app.models.user import User
from app.schemas.reviews import review_out

logger = get_logger("crud")


# Lookups that signal NotFound


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"User {user_id} not found")
        raise NotFound("User not found")
    return user


def get_brewery_or_404(db: Session, brewery_id: int) -> Brewery:
    brewery = db.query(Brewery).filter(Brewery.id == brewery_id).first()
    if not brewery:
        logger.warning(f"Brewery {brewery_id} not found")
        raise NotFound("Brewery not found")
    return brewery


def get_sake_or_404(db: Session, sake_id: int) -> Sake:
    sake = db.query(Sake).filter(Sake.id == sake_id).first()
    if not sake:
        logger.warning(f"Sake {sake_id} not found")
        raise NotFound("Sake not found")
    return sake


def get_review_or_404(db: Session, review_id: int, sake_id: Optional[int] = None) -> Review:
    query = db.query(Review).filter(Review.id == review_id)
    if sake_id is not None:
        query = query.filter(Review.sake_id == sake_id)
    review = query.first()
    if not review:
        raise NotFound("Review not found")
    return review


def get_note_or_404(db: Session, note_id: int, brewery_id: int) -> BreweryNote:
    note = (
        db.query(BreweryNote)
        .filter(BreweryNote.id == note_id, BreweryNote.brewery_id == brewery_id)
        .first()
    )
    if not note:
        raise NotFound("Brewery note not found")
    return note


def get_user_by_name(db: Session, name: str) -> Optional[User]:
    return db.query(User).filter(User.name == name).first()


# Aggregate ratings, always computed from the current review rows


def sake_average_subquery():
    return (
        select(cast(func.avg(Review.rating), Float))
        .where(Review.sake_id == Sake.id)
        .correlate(Sake)
        .scalar_subquery()
    )


def brewery_average_subquery():
    return (
        select(cast(func.avg(Review.rating), Float))
        .select_from(Review)
        .join(Sake, Sake.id == Review.sake_id)
        .where(Sake.brewery_id == Brewery.id)
        .correlate(Brewery)
        .scalar_subquery()
    )


def as_rating(value) -> Optional[float]:
    return float(value) if value is not None else None


def average_rating_for_sake(db: Session, sake_id: int) -> Optional[float]:
    value = db.query(func.avg(Review.rating)).filter(Review.sake_id == sake_id).scalar()
    return as_rating(value)


def reviews_by_sake(db: Session, sake_ids: Iterable[int]) -> Dict[int, List[dict]]:
    """Reviews (newest first) with their author, grouped by sake id."""
    sake_ids = list(sake_ids)
    grouped: Dict[int, List[dict]] = {sake_id: [] for sake_id in sake_ids}
    if not sake_ids:
        return grouped

    rows = (
        db.query(Review, User.name)
        .join(User, User.id == Review.user_id)
        .filter(Review.sake_id.in_(sake_ids))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    for review, user_name in rows:
        grouped[review.sake_id].append(review_out(review, user_name))
    return grouped
