import pytest
from fastapi.testclient import TestClient

from feedbackform.app import create_app
from feedbackform.config import Settings
from feedbackform.storage import init_storage

OWNER = {"Authorization": "Bearer owner-token"}
OTHER = {"Authorization": "Bearer other-token"}


@pytest.fixture(params=["json", "sqlite"])
def settings(request, monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "store.json"))
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("AUTH_MODE", "token")
    monkeypatch.setenv("AUTH_TOKENS", "owner-token:alice,other-token:bob")
    monkeypatch.setenv("DEFAULT_PAGE_LIMIT", "20")
    monkeypatch.setenv("MAX_PAGE_LIMIT", "100")
    return Settings()


@pytest.fixture
def storage(settings):
    return init_storage(settings)


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage)


@pytest.fixture
def client(app):
    return TestClient(app)


def form_payload(**overrides):
    payload = {
        "title": "Workshop feedback",
        "description": "Tell us how it went",
        "questions": [
            {"text": "What did you like?", "type": "text", "required": True},
            {"text": "Rate the pace", "type": "multiple-choice", "options": ["X", "Y"], "required": True},
            {"text": "Anything else?", "type": "text", "required": False},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_form(client):
    def _make(**overrides):
        r = client.post("/api/forms", json=form_payload(**overrides), headers=OWNER)
        assert r.status_code == 201, r.text
        return r.json()["form"]

    return _make
