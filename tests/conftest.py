import copy
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from apps.api.main import create_app
from core.config import Settings
from core.storage.fixture_store import FixtureStore

FIXTURE: Dict[str, Any] = {
    "posts": [
        {"id": 1, "title": "Hello World", "views": 100, "author": {"name": "alice"}, "published": True},
        {"id": 2, "title": "Second post", "views": 50, "author": {"name": "bob"}, "published": False},
        {"id": 3, "title": "Another hello", "views": 250, "author": {"name": "alice"}, "published": True},
    ],
    "comments": [
        {"id": 1, "body": "Nice", "postId": 1},
        {"id": 2, "body": "Great", "postId": 1},
        {"id": 3, "body": "Meh", "postId": 2},
    ],
    "profile": {"name": "typicode"},
}


@pytest.fixture
def fixture_data() -> Dict[str, Any]:
    return copy.deepcopy(FIXTURE)


@pytest.fixture
def store(fixture_data) -> FixtureStore:
    return FixtureStore(fixture_data)


@pytest.fixture
def make_client(tmp_path):
    def _make(data: Dict[str, Any] | None = None, **overrides: Any) -> TestClient:
        overrides.setdefault("static_dir", str(tmp_path / "public"))
        app_settings = Settings(**overrides)
        app = create_app(app_settings, FixtureStore(FIXTURE if data is None else data))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
