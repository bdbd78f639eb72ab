from pydantic import BaseModel, field_validator

from app.constants import NOTE_MAX_LENGTH
from app.models.types import format_timestamp


class NoteIn(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter a comment")
        if len(value) > NOTE_MAX_LENGTH:
            raise ValueError(f"Comment must be at most {NOTE_MAX_LENGTH} characters")
        return value


def brewery_out(brewery) -> dict:
    return {
        "breweryId": brewery.id,
        "name": brewery.name,
        "mapPositionX": brewery.map_position_x,
        "mapPositionY": brewery.map_position_y,
        "area": brewery.area,
    }


def note_out(note, user_name: str) -> dict:
    return {
        "noteId": note.id,
        "userId": note.user_id,
        "userName": user_name,
        "breweryId": note.brewery_id,
        "comment": note.comment,
        "createdAt": format_timestamp(note.created_at),
    }
