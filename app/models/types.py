import json
from datetime import datetime, timezone

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    # fixed width, so string order equals time order
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)


class TagList(TypeDecorator):
    """JSON array of tag strings stored as text.

    Tags are written unescaped (``["甘口","辛口"]``) so a single tag can be
    matched with ``LIKE '%"甘口"%'`` on any backend.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "[]"
        return json.dumps(list(value), ensure_ascii=False, separators=(",", ":"))

    def process_result_value(self, value, dialect):
        if not value:
            return []
        return json.loads(value)

    def coerce_compared_value(self, op, value):
        # LIKE patterns are plain strings, not tag lists
        if isinstance(value, str):
            return Text()
        return self


def tag_pattern(tag: str) -> str:
    return "%" + json.dumps(tag, ensure_ascii=False) + "%"
