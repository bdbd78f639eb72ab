"""Pytest fixtures for the API tests.

Each test gets a fresh in-memory SQLite database wired into the app through
``dependency_overrides``, and a notifier that records events instead of
calling Discord.
"""
import os
import tempfile
from datetime import datetime, timedelta

os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DISCORD_WEBHOOK_URL"] = ""
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="sake_review_logs_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, build_engine, get_db
from app.main import app
from app.models.brewery import Brewery
from app.models.sake import Sake
from app.services.discord import Notifier, get_notifier


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []

    async def send(self, event):
        self.events.append(event)


class FailingNotifier(Notifier):
    def __init__(self):
        self.calls = 0

    async def send(self, event):
        self.calls += 1
        raise RuntimeError("webhook is down")


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def breweries(db):
    """Two breweries; the first has two seed sakes, the second one."""
    first = Brewery(name="山田酒造", map_position_x=10.0, map_position_y=20.0, area="A")
    second = Brewery(name="川口酒造", map_position_x=30.0, map_position_y=40.0, area="B")
    db.add_all([first, second])
    db.flush()
    db.add_all(
        [
            Sake(brewery_id=first.id, name="山田 純米", type="純米", category="清酒"),
            Sake(brewery_id=first.id, name="山田 梅酒", category="リキュール", is_limited=True, paid_tasting_price=500),
            Sake(brewery_id=second.id, name="川口 本醸造", type="本醸造"),
        ]
    )
    db.commit()
    return {"first": first.id, "second": second.id}


@pytest.fixture
def seed_sake_id(db, breweries):
    return db.query(Sake).filter(Sake.name == "山田 純米").one().id


def register(client, name):
    response = client.post("/api/users", json={"name": name})
    assert response.status_code in (200, 201), response.text
    return response.json()["id"]


def as_user(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture
def alice(client):
    return register(client, "Alice")


@pytest.fixture
def bob(client):
    return register(client, "Bob")


def timestamps(count, start=datetime(2026, 5, 1, 12, 0, 0), step=timedelta(minutes=1)):
    return [start + step * i for i in range(count)]


def collect_pages(client, url, params, limit):
    """Follow nextCursor until the end and return every item seen."""
    items, cursor = [], None
    while True:
        query = dict(params, limit=limit)
        if cursor:
            query["cursor"] = cursor
        page = client.get(url, params=query).json()
        items.extend(page["items"])
        cursor = page["nextCursor"]
        if cursor is None:
            return items
