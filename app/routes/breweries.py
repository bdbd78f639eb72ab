from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import exists, and_
from sqlalchemy.orm import Session

from app import crud
from app.auth import ensure_owner, get_caller_id, require_caller_id
from app.database import get_db
from app.logger import get_logger
from app.models.brewery import Brewery, BreweryNote
from app.models.sake import Review, Sake
from app.models.user import User
from app.schemas.breweries import NoteIn, brewery_out, note_out
from app.schemas.sakes import SakeIn, sake_out
from app.services.discord import BreweryNotePosted, Notifier, dispatch, get_notifier

logger = get_logger("routes.breweries")

router = APIRouter()


@router.get("")
def list_breweries(
    db: Session = Depends(get_db),
    caller_id: Optional[str] = Depends(get_caller_id),
):
    """Breweries for the venue map with their average rating over all sakes."""
    average = crud.brewery_average_subquery().label("average_rating")

    if caller_id:
        reviewed = exists().where(
            and_(
                Review.sake_id == Sake.id,
                Sake.brewery_id == Brewery.id,
                Review.user_id == caller_id,
            )
        ).correlate(Brewery).label("has_reviewed")
        rows = db.query(Brewery, average, reviewed).order_by(Brewery.id).all()
    else:
        rows = [(brewery, avg, False) for brewery, avg in db.query(Brewery, average).order_by(Brewery.id).all()]

    output = []
    for brewery, avg, has_reviewed in rows:
        record = brewery_out(brewery)
        record["averageRating"] = crud.as_rating(avg)
        record["hasReviewed"] = bool(has_reviewed)
        output.append(record)
    return output


@router.get("/{brewery_id}")
def get_brewery(brewery_id: int, db: Session = Depends(get_db)):
    brewery = crud.get_brewery_or_404(db, brewery_id)

    average = crud.sake_average_subquery().label("average_rating")
    rows = (
        db.query(Sake, average)
        .filter(Sake.brewery_id == brewery_id)
        .order_by(Sake.id)
        .all()
    )
    reviews = crud.reviews_by_sake(db, [sake.id for sake, _ in rows])

    sakes = []
    for sake, avg in rows:
        record = sake_out(sake)
        record["averageRating"] = crud.as_rating(avg)
        record["reviews"] = reviews[sake.id]
        sakes.append(record)

    return {"brewery": brewery_out(brewery), "sakes": sakes}


# ---------------------------------------------------------------------------
# Brewery notes
# ---------------------------------------------------------------------------


@router.get("/{brewery_id}/notes")
def list_brewery_notes(brewery_id: int, db: Session = Depends(get_db)):
    crud.get_brewery_or_404(db, brewery_id)

    rows = (
        db.query(BreweryNote, User.name)
        .join(User, User.id == BreweryNote.user_id)
        .filter(BreweryNote.brewery_id == brewery_id)
        .order_by(BreweryNote.created_at.desc(), BreweryNote.id.desc())
        .all()
    )
    return [note_out(note, user_name) for note, user_name in rows]


@router.post("/{brewery_id}/notes", status_code=status.HTTP_201_CREATED)
def create_brewery_note(
    brewery_id: int,
    payload: NoteIn,
    background_tasks: BackgroundTasks,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    brewery = crud.get_brewery_or_404(db, brewery_id)
    user = crud.get_user_or_404(db, caller_id)

    note = BreweryNote(user_id=user.id, brewery_id=brewery.id, comment=payload.content)
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info(f"User {user.id} posted note {note.id} on brewery {brewery.id}")

    background_tasks.add_task(
        dispatch,
        notifier,
        BreweryNotePosted(
            user_name=user.name,
            brewery_id=brewery.id,
            brewery_name=brewery.name,
            comment=note.comment,
        ),
    )
    return note_out(note, user.name)


@router.put("/{brewery_id}/notes/{note_id}")
def update_brewery_note(
    brewery_id: int,
    note_id: int,
    payload: NoteIn,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    note = crud.get_note_or_404(db, note_id, brewery_id)
    ensure_owner(note.user_id, caller_id, "brewery note")

    note.comment = payload.content
    db.commit()
    db.refresh(note)
    logger.info(f"User {caller_id} edited note {note.id}")

    user = crud.get_user_or_404(db, note.user_id)
    return note_out(note, user.name)


@router.delete("/{brewery_id}/notes/{note_id}")
def delete_brewery_note(
    brewery_id: int,
    note_id: int,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    note = crud.get_note_or_404(db, note_id, brewery_id)
    ensure_owner(note.user_id, caller_id, "brewery note")

    db.delete(note)
    db.commit()
    logger.info(f"User {caller_id} deleted note {note_id}")
    return {"success": True}


# ---------------------------------------------------------------------------
# Custom sakes
# ---------------------------------------------------------------------------


@router.post("/{brewery_id}/sakes", status_code=status.HTTP_201_CREATED)
def create_custom_sake(
    brewery_id: int,
    payload: SakeIn,
    caller_id: str = Depends(require_caller_id),
    db: Session = Depends(get_db),
):
    brewery = crud.get_brewery_or_404(db, brewery_id)
    user = crud.get_user_or_404(db, caller_id)

    sake = Sake(
        brewery_id=brewery.id,
        name=payload.name,
        type=payload.type,
        category=payload.category,
        is_limited=payload.isLimited,
        paid_tasting_price=payload.paidTastingPrice,
        is_custom=True,
        added_by=user.id,
    )
    db.add(sake)
    db.commit()
    db.refresh(sake)
    logger.info(f"User {user.id} added custom sake {sake.id} ({sake.name}) to brewery {brewery.id}")
    return sake_out(sake)
