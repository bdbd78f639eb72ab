from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from app.constants import DEFAULT_CATEGORY
from app.database import Base
from app.models.types import TagList, utc_now


class Sake(Base):
    __tablename__ = "sakes"
    __table_args__ = (Index("idx_sakes_brewery", "brewery_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    brewery_id = Column(Integer, ForeignKey("breweries.id"), nullable=False)

    name = Column(String(128), nullable=False)
    type = Column(String(64), nullable=True)
    category = Column(String(16), nullable=False, default=DEFAULT_CATEGORY)

    is_limited = Column(Boolean, nullable=False, default=False)
    paid_tasting_price = Column(Integer, nullable=True)

    # seed rows are false and cannot be edited through the API
    is_custom = Column(Boolean, nullable=False, default=False)
    added_by = Column(String(32), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=False), nullable=False, default=utc_now)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        Index("idx_reviews_sake", "sake_id"),
        Index("idx_reviews_user", "user_id"),
        Index("idx_reviews_created", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    sake_id = Column(Integer, ForeignKey("sakes.id"), nullable=False)

    rating = Column(Integer, nullable=False)
    tags = Column(TagList, nullable=False, default=list)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=False), nullable=False, default=utc_now)


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "sake_id", name="uq_bookmarks_user_sake"),
        Index("idx_bookmarks_user", "user_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    sake_id = Column(Integer, ForeignKey("sakes.id"), nullable=False)
    created_at = Column(DateTime(timezone=False), nullable=False, default=utc_now)
