import json
import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/99")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("GEMINI_API_KEY", "")
os.environ.setdefault("API_URL", "http://testserver")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pathfinder.application.certificates import IImageRenderer, ImageRenderError
from pathfinder.application.content import AIServiceError, ContentGenerator, ITextGenerator
from pathfinder.infrastructure.db import Base, get_db
from pathfinder.infrastructure.security import create_access_token
from pathfinder.interfaces.http.dependencies import get_content_generator, get_image_renderer
from pathfinder.main import app


class FakeTextGenerator(ITextGenerator):
    """Replays scripted replies; an exception instance is raised instead of returned."""

    def __init__(self, replies=None, default=None):
        self.replies = list(replies or [])
        self.default = default if default is not None else AIServiceError("offline")
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeRenderer(IImageRenderer):
    PNG = b"\x89PNG\r\n\x1a\nfake"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.rendered = []

    def render(self, html: str) -> bytes:
        self.rendered.append(html)
        if self.fail:
            raise ImageRenderError("browser crashed")
        return self.PNG


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()

@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = Session()
    yield db
    db.close()

@pytest.fixture
def text_generator():
    return FakeTextGenerator()

@pytest.fixture
def content(text_generator):
    return ContentGenerator(text_generator, max_retries=2, base_delay=2.0, sleep=lambda s: None)

@pytest.fixture
def renderer():
    return FakeRenderer()

@pytest.fixture
def memory_cache(monkeypatch):
    """Stands in for Redis in the AI router."""
    store = {}
    from pathfinder.interfaces.http.routers import ai as ai_router
    monkeypatch.setattr(ai_router, "get_cache", lambda key: json.loads(store[key]) if key in store else None)
    monkeypatch.setattr(ai_router, "set_cache", lambda key, value, ttl=None: store.__setitem__(key, json.dumps(value)) or True)
    return store

@pytest.fixture
def client(engine, content, renderer, memory_cache):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_content_generator] = lambda: content
    app.dependency_overrides[get_image_renderer] = lambda: renderer
    yield TestClient(app)
    app.dependency_overrides.clear()

def register(client, email="ada@example.com", password="secret123", name="Ada Lovelace"):
    response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()

@pytest.fixture
def auth(client):
    """Registers a user and returns (headers, user dict)."""
    body = register(client)
    return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

def bearer_for(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
