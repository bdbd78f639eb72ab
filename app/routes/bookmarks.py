from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import crud
from app.auth import require_caller_id
from app.database import get_db
from app.errors import Conflict, NotFound
from app.logger import get_logger
from app.models.brewery import Brewery
from app.models.sake import Bookmark, Sake
from app.models.types import format_timestamp
from app.schemas.bookmarks import BookmarkCreated, BookmarkIn, BookmarkList

logger = get_logger("routes.bookmarks")

router = APIRouter()


@router.get("", response_model=BookmarkList)
def list_bookmarks(caller_id: str = Depends(require_caller_id), db: Session = Depends(get_db)):
    rows = (
        db.query(Bookmark, Sake, Brewery)
        .join(Sake, Sake.id == Bookmark.sake_id)
        .join(Brewery, Brewery.id == Sake.brewery_id)
        .filter(Bookmark.user_id == caller_id)
        .order_by(Bookmark.created_at, Bookmark.id)
        .all()
    )
    return [
        {
            "bookmarkId": bookmark.id,
            "sake": {
                "sakeId": sake.id,
                "name": sake.name,
                "type": sake.type,
                "isLimited": sake.is_limited,
                "paidTastingPrice": sake.paid_tasting_price,
                "category": sake.category,
            },
            "brewery": {"breweryId": brewery.id, "name": brewery.name},
            "createdAt": format_timestamp(bookmark.created_at),
        }
        for bookmark, sake, brewery in rows
    ]


def _find(db: Session, user_id: str, sake_id: int):
    return db.query(Bookmark).filter(Bookmark.user_id == user_id, Bookmark.sake_id == sake_id).first()


@router.post("", response_model=BookmarkCreated, status_code=status.HTTP_201_CREATED)
def add_bookmark(payload: BookmarkIn, caller_id: str = Depends(require_caller_id), db: Session = Depends(get_db)):
    user = crud.get_user_or_404(db, caller_id)
    sake = crud.get_sake_or_404(db, payload.sakeId)

    if _find(db, user.id, sake.id):
        raise Conflict("Sake is already bookmarked")

    bookmark = Bookmark(user_id=user.id, sake_id=sake.id)
    db.add(bookmark)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against the unique (user_id, sake_id) constraint
        db.rollback()
        raise Conflict("Sake is already bookmarked")
    db.refresh(bookmark)

    logger.info(f"User {user.id} bookmarked sake {sake.id}")
    return {"bookmarkId": bookmark.id, "sakeId": bookmark.sake_id}


@router.delete("/{sake_id}")
def remove_bookmark(sake_id: int, caller_id: str = Depends(require_caller_id), db: Session = Depends(get_db)):
    bookmark = _find(db, caller_id, sake_id)
    if not bookmark:
        raise NotFound("Bookmark not found")

    db.delete(bookmark)
    db.commit()
    logger.info(f"User {caller_id} removed bookmark on sake {sake_id}")
    return {"success": True}
