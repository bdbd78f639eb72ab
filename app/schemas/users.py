from pydantic import BaseModel, field_validator

from app.constants import USER_NAME_MAX_LENGTH
from app.models.types import format_timestamp


class UserCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a name")
        if len(value) > USER_NAME_MAX_LENGTH:
            raise ValueError(f"Name must be at most {USER_NAME_MAX_LENGTH} characters")
        return value


class UserOut(BaseModel):
    id: str
    name: str
    createdAt: str


def user_out(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "createdAt": format_timestamp(user.created_at),
    }
