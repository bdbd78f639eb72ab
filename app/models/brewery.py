from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text

from app.database import Base
from app.models.types import utc_now


class Brewery(Base):
    __tablename__ = "breweries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), nullable=False)
    # badge position on the venue floor plan
    map_position_x = Column(Float, nullable=False, default=0)
    map_position_y = Column(Float, nullable=False, default=0)
    area = Column(String(64), nullable=True)


class BreweryNote(Base):
    __tablename__ = "brewery_notes"
    __table_args__ = (
        Index("idx_brewery_notes_brewery", "brewery_id"),
        Index("idx_brewery_notes_created", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    brewery_id = Column(Integer, ForeignKey("breweries.id"), nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=False), nullable=False, default=utc_now)
