from typing import Optional

from fastapi import Header

from app.errors import Forbidden, Unauthorized
from app.logger import get_logger

logger = get_logger("auth")

# The header is trusted as-is: there are no passwords, sessions or tokens.
# Whoever sends a user id acts as that user.
USER_ID_HEADER = "X-User-Id"


async def get_caller_id(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> Optional[str]:
    if x_user_id is None:
        return None
    x_user_id = x_user_id.strip()
    return x_user_id or None


async def require_caller_id(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> str:
    caller_id = await get_caller_id(x_user_id)
    if caller_id is None:
        raise Unauthorized()
    return caller_id


def ensure_owner(owner_id: str, caller_id: str, what: str = "resource") -> None:
    """Raise Forbidden unless the caller is the row's author."""
    if owner_id != caller_id:
        logger.warning(f"User {caller_id} tried to modify {what} owned by {owner_id}")
        raise Forbidden(f"You can only modify your own {what}")
