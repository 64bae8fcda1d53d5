"""
Pytest configuration shared by the whole test suite.

- Puts the backend directory on sys.path
- In-memory SQLite session per test
- FastAPI TestClient bound to that session
- Factories for climates, styles and model script responses
"""

import json
import sys
import uuid
from pathlib import Path

import pytest

# Add backend directory to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from config import settings  # noqa: E402
from database import Base, get_db  # noqa: E402
from models import Climate, Style  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def db_session():
    """Fresh in-memory database for each test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session, monkeypatch):
    """TestClient with API-key auth disabled and the test session injected"""
    from main import app

    monkeypatch.setattr(settings, "API_KEY", "")

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"X-User-Id": USER_ID}


@pytest.fixture
def other_user_headers():
    return {"X-User-Id": OTHER_USER_ID}


@pytest.fixture
def make_climate(db_session):
    """Factory that stores a climate (personal, coherent CURIOSITY by default)"""

    def _make(**overrides) -> Climate:
        values = {
            "id": str(uuid.uuid4()),
            "user_id": USER_ID,
            "is_system": False,
            "name": "Test climate",
            "emotional_state": "CURIOSITY",
            "revelation_dynamic": "PROGRESSIVE",
            "narrative_pressure": "FLUID",
            "hook_type": "QUESTION",
            "closing_type": "REVELATION",
            "sentence_max_words": 15,
        }
        values.update(overrides)
        climate = Climate(**values)
        db_session.add(climate)
        db_session.commit()
        db_session.refresh(climate)
        return climate

    return _make


@pytest.fixture
def make_style(db_session):
    """Factory that stores a style (personal EDUCATIONAL by default)"""

    def _make(**overrides) -> Style:
        values = {
            "id": str(uuid.uuid4()),
            "user_id": USER_ID,
            "is_system": False,
            "name": "Test style",
            "content_type": "EDUCATIONAL",
            "hook_type": "QUESTION",
            "cta_type": "ENGAGEMENT",
            "visual_prompt_base": "cinematic lighting, vertical 9:16",
            "keywords": [],
            "compatible_climates": [],
        }
        values.update(overrides)
        style = Style(**values)
        db_session.add(style)
        db_session.commit()
        db_session.refresh(style)
        return style

    return _make


@pytest.fixture
def script_json():
    """Factory for a scriptwriter response with `scene_count` scenes"""

    def _make(scene_count: int = 3, **overrides) -> str:
        script = {
            "title": "Why octopuses have three hearts",
            "summary": "A tour of octopus anatomy",
            "hook": "What needs three hearts to survive?",
            "scenes": [
                {
                    "order": index,
                    "narration": f"Narration {index}",
                    "visual_description": f"Visual {index}",
                    "duration": 5,
                }
                for index in range(scene_count)
            ],
            "cta": "Follow for more ocean secrets",
        }
        script.update(overrides)
        return json.dumps(script)

    return _make


@pytest.fixture
def prompts_json():
    """Factory for a prompt-engineer response with `scene_count` prompts"""

    def _make(scene_count: int = 3) -> str:
        return json.dumps({
            "prompts": [
                {
                    "scene_order": index,
                    "image_prompt": f"octopus scene {index}, cinematic lighting",
                    "negative_prompt": "blurry",
                }
                for index in range(scene_count)
            ],
            "style": "deep sea documentary",
            "consistency": "same octopus in every frame",
        })

    return _make
