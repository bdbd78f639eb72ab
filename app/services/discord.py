"""Best-effort Discord notifications for new reviews and brewery notes.

Notifications run after the triggering row is committed. A failed webhook
call is logged and dropped: it is never retried and never reaches the
client that posted the review or note.
"""
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

import aiohttp

from app.logger import get_logger

logger = get_logger("notify")

DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL")
DISCORD_TIMEOUT_SECONDS = float(os.getenv("DISCORD_TIMEOUT_SECONDS", "5"))

REVIEW_EMBED_COLOR = 0x3B82F6


@dataclass(frozen=True)
class ReviewPosted:
    user_name: str
    brewery_id: int
    brewery_name: str
    sake_name: str
    rating: int
    tags: Tuple[str, ...] = field(default_factory=tuple)
    comment: Optional[str] = None


@dataclass(frozen=True)
class BreweryNotePosted:
    user_name: str
    brewery_id: int
    brewery_name: str
    comment: str


Event = Union[ReviewPosted, BreweryNotePosted]


def review_message(event: ReviewPosted) -> dict:
    fields = [
        {"name": "投稿者", "value": event.user_name, "inline": True},
        {"name": "酒蔵", "value": f"{event.brewery_name or '不明'} ({event.brewery_id})", "inline": True},
        {"name": "お酒", "value": event.sake_name, "inline": True},
        {"name": "評価", "value": "⭐" * event.rating, "inline": False},
    ]
    if event.tags:
        fields.append({"name": "タグ", "value": ", ".join(event.tags), "inline": False})
    if event.comment:
        fields.append({"name": "コメント", "value": event.comment, "inline": False})

    return {
        "embeds": [
            {
                "title": "🍶 新しいレビューが投稿されました",
                "color": REVIEW_EMBED_COLOR,
                "fields": fields,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ]
    }


def note_message(event: BreweryNotePosted) -> dict:
    return {
        "content": (
            f"**{event.user_name}** さんが **{event.brewery_name} ({event.brewery_id})** "
            f"にノートを投稿しました\n\n{event.comment}"
        )
    }


def build_message(event: Event) -> dict:
    if isinstance(event, ReviewPosted):
        return review_message(event)
    if isinstance(event, BreweryNotePosted):
        return note_message(event)
    raise TypeError(f"Unknown notification event: {type(event).__name__}")


class Notifier:
    async def send(self, event: Event) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    async def send(self, event: Event) -> None:
        logger.debug(f"Notifications disabled, dropping {type(event).__name__}")


class DiscordNotifier(Notifier):
    def __init__(self, webhook_url: str, timeout: float = DISCORD_TIMEOUT_SECONDS):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send(self, event: Event) -> None:
        payload = build_message(event)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.webhook_url, json=payload) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise RuntimeError(f"Discord webhook returned {resp.status}: {body[:200]}")
        logger.info(f"Sent {type(event).__name__} for brewery {event.brewery_id}")


def get_notifier() -> Notifier:
    if DISCORD_WEBHOOK_URL:
        return DiscordNotifier(DISCORD_WEBHOOK_URL)
    return NullNotifier()


async def dispatch(notifier: Notifier, event: Event) -> None:
    """Send one event, swallowing any failure."""
    try:
        await notifier.send(event)
    except Exception:
        logger.error(f"Failed to send {type(event).__name__} notification", exc_info=True)
