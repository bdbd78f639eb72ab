from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class TimelineReviewItem(BaseModel):
    type: Literal["review"] = "review"
    id: int
    userName: str
    createdAt: str
    breweryId: int
    breweryName: str
    sakeId: int
    sakeName: str
    rating: int
    tags: List[str]
    comment: Optional[str] = None
    isLimited: bool
    paidTastingPrice: Optional[int] = None


class TimelineNoteItem(BaseModel):
    type: Literal["brewery_note"] = "brewery_note"
    id: int
    userName: str
    createdAt: str
    breweryId: int
    breweryName: str
    content: str


TimelineItem = Annotated[Union[TimelineReviewItem, TimelineNoteItem], Field(discriminator="type")]


class TimelinePage(BaseModel):
    items: List[TimelineItem]
    nextCursor: Optional[str] = None
