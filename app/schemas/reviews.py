from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.constants import VALID_TAGS
from app.models.types import format_timestamp


def check_tags(tags: List[str]) -> List[str]:
    invalid = [tag for tag in tags if tag not in VALID_TAGS]
    if invalid:
        raise ValueError(f"Invalid tags: {', '.join(invalid)}")
    # keep first occurrence order
    return list(dict.fromkeys(tags))


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    tags: List[str] = Field(default_factory=list)
    comment: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def tags_in_vocabulary(cls, value: List[str]) -> List[str]:
        return check_tags(value)

    @field_validator("comment")
    @classmethod
    def blank_comment_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


def review_out(review, user_name: str) -> dict:
    """Review as embedded in sake and brewery detail responses."""
    return {
        "reviewId": review.id,
        "rating": review.rating,
        "tags": list(review.tags or []),
        "comment": review.comment,
        "createdAt": format_timestamp(review.created_at),
        "user": {"id": review.user_id, "name": user_name},
    }


def review_search_item(row) -> dict:
    """Review joined with its author, sake and brewery."""
    review = row.Review
    return {
        "reviewId": review.id,
        "rating": review.rating,
        "tags": list(review.tags or []),
        "comment": review.comment,
        "createdAt": format_timestamp(review.created_at),
        "user": {"id": review.user_id, "name": row.user_name},
        "sake": {
            "id": review.sake_id,
            "name": row.sake_name,
            "type": row.sake_type,
            "isLimited": row.is_limited,
            "paidTastingPrice": row.paid_tasting_price,
        },
        "brewery": {"id": row.brewery_id, "name": row.brewery_name},
    }
