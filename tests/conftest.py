import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient

from api.deps import build_services, get_services
from api_server import app
from config.settings import settings
from llm_gateway import LlmGatewayError


class FakeModel:
    """Model double returning canned replies in order; the last reply repeats."""

    def __init__(self, *replies, error=None):
        self.replies = [r if isinstance(r, str) else json.dumps(r) for r in replies]
        self.error = error
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.replies:
            raise LlmGatewayError("no canned reply")
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch, tmp_path):
    db_path = tmp_path / "test.db"
    monkeypatch.setattr(settings, "DB_PATH", str(db_path), raising=False)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"), raising=False)
    monkeypatch.setattr(settings, "APP_CONFIG_PATH", str(tmp_path / "missing.json"), raising=False)
    yield db_path


@pytest.fixture
def make_model():
    return FakeModel


@pytest.fixture
def services():
    return build_services(models={})


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def register(client, email="ada@example.com", name="Ada", password="secret123"):
    resp = client.post("/api/auth/register", json={"email": email, "name": name, "password": password})
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)


@pytest.fixture
def other_headers(client):
    return register(client, email="grace@example.com", name="Grace")
