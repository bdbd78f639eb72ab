from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.constants import DEFAULT_CATEGORY, SAKE_NAME_MAX_LENGTH, SAKE_TYPE_MAX_LENGTH
from app.models.types import format_timestamp

Category = Literal["清酒", "リキュール", "みりん", "その他"]


class SakeIn(BaseModel):
    name: str
    type: Optional[str] = None
    isLimited: bool = False
    paidTastingPrice: Optional[int] = Field(None, gt=0)
    category: Category = DEFAULT_CATEGORY

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter the sake name")
        if len(value) > SAKE_NAME_MAX_LENGTH:
            raise ValueError(f"Sake name must be at most {SAKE_NAME_MAX_LENGTH} characters")
        return value

    @field_validator("type")
    @classmethod
    def blank_type_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if len(value) > SAKE_TYPE_MAX_LENGTH:
            raise ValueError(f"Sake type must be at most {SAKE_TYPE_MAX_LENGTH} characters")
        return value or None


def sake_out(sake) -> dict:
    return {
        "sakeId": sake.id,
        "breweryId": sake.brewery_id,
        "name": sake.name,
        "type": sake.type,
        "category": sake.category,
        "isLimited": sake.is_limited,
        "paidTastingPrice": sake.paid_tasting_price,
        "isCustom": sake.is_custom,
        "addedBy": sake.added_by,
        "createdAt": format_timestamp(sake.created_at),
    }


def sake_search_item(row) -> dict:
    sake = row.Sake
    return {
        "sakeId": sake.id,
        "name": sake.name,
        "type": sake.type,
        "category": sake.category,
        "isLimited": sake.is_limited,
        "paidTastingPrice": sake.paid_tasting_price,
        "isCustom": sake.is_custom,
        "brewery": {"breweryId": sake.brewery_id, "name": row.brewery_name},
    }
