from typing import List, Optional

from pydantic import BaseModel


class BookmarkIn(BaseModel):
    sakeId: int


class BookmarkCreated(BaseModel):
    bookmarkId: int
    sakeId: int


class BookmarkedSake(BaseModel):
    sakeId: int
    name: str
    type: Optional[str] = None
    isLimited: bool
    paidTastingPrice: Optional[int] = None
    category: str


class BookmarkedBrewery(BaseModel):
    breweryId: int
    name: str


class BookmarkOut(BaseModel):
    bookmarkId: int
    sake: BookmarkedSake
    brewery: BookmarkedBrewery
    createdAt: str


BookmarkList = List[BookmarkOut]
