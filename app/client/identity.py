"""Device-local identity: the user id and name handed out at registration.

There is no session or token. Whoever holds the pair is that user, and the id
is sent as the ``X-User-Id`` header. The pair is passed explicitly to the API
client rather than read from a global.
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.logger import get_logger

logger = get_logger("client.identity")

DEFAULT_IDENTITY_FILE = os.getenv(
    "SAKE_REVIEW_IDENTITY_FILE", os.path.join(os.path.expanduser("~"), ".sake_review", "identity.json")
)

USER_ID_KEY = "sake-navi-user-id"
USER_NAME_KEY = "sake-navi-user-name"


@dataclass(frozen=True)
class LocalIdentity:
    user_id: str
    user_name: str


class IdentityStore:
    """Persists the identity pair in a small JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or DEFAULT_IDENTITY_FILE)

    def _read(self) -> dict:
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning(f"Ignoring unreadable identity file {self.path}", exc_info=True)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, identity: LocalIdentity) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(
                {USER_ID_KEY: identity.user_id, USER_NAME_KEY: identity.user_name},
                f,
                ensure_ascii=False,
            )

    def load(self) -> Optional[LocalIdentity]:
        data = self._read()
        user_id = data.get(USER_ID_KEY)
        user_name = data.get(USER_NAME_KEY)
        # both values are required to count as signed in
        if not user_id or not user_name:
            return None
        return LocalIdentity(user_id=user_id, user_name=user_name)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def is_authenticated(self) -> bool:
        return self.load() is not None
