from sqlalchemy import Column, DateTime, String
import uuid

from app.database import Base
from app.models.types import utc_now


def new_user_id() -> str:
    return uuid.uuid4().hex[:16]


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_user_id, index=True)
    name = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=False), nullable=False, default=utc_now)
