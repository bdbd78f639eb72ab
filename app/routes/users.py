from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app import crud
from app.database import get_db
from app.limiter import USER_REGISTRATION_RATE_LIMIT, limiter
from app.logger import get_logger
from app.models.user import User
from app.schemas.users import UserCreate, UserOut, user_out

logger = get_logger("routes.users")

router = APIRouter()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(USER_REGISTRATION_RATE_LIMIT)
def register_user(request: Request, response: Response, payload: UserCreate, db: Session = Depends(get_db)):
    """Register a display name. Registering an existing name returns that user."""
    existing = crud.get_user_by_name(db, payload.name)
    if existing:
        logger.info(f"Name '{payload.name}' already registered as {existing.id}")
        response.status_code = status.HTTP_200_OK
        return user_out(existing)

    user = User(name=payload.name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # registered concurrently under the same name
        db.rollback()
        existing = crud.get_user_by_name(db, payload.name)
        if existing is None:
            raise
        response.status_code = status.HTTP_200_OK
        return user_out(existing)

    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.name})")
    return user_out(user)


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    users = db.query(User).order_by(User.created_at, User.id).all()
    return [user_out(user) for user in users]
