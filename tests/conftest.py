from __future__ import annotations

import os

# Must be set before the app modules read their settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["EMAIL_API_KEY"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["FROM_EMAIL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from app import db, models  # noqa: F401
from app.main import app
from app.services import emailer, summarizer


@pytest.fixture(autouse=True)
def _fresh_database():
    SQLModel.metadata.drop_all(db.engine)
    SQLModel.metadata.create_all(db.engine)
    yield


@pytest.fixture(autouse=True)
def outbox(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "outbox"
    monkeypatch.setattr(emailer, "OUTBOX_DIR", path)
    return path


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_summarizer(monkeypatch: pytest.MonkeyPatch):
    calls = []

    async def _generate(content, prompt, max_tokens=1000):
        calls.append({"content": content, "prompt": prompt, "max_tokens": max_tokens})
        return summarizer.SummaryResult(
            summary=f"# Weekly Sync\n- discussed {prompt}",
            tokens_used=42,
            model="test-model",
        )

    monkeypatch.setattr(summarizer, "generate_summary", _generate)
    return calls


@pytest.fixture
def uploaded_file_id(client) -> str:
    r = client.post(
        "/api/upload",
        files={"file": ("standup.txt", b"Alice: ship it on Friday.\nBob: agreed.", "text/plain")},
    )
    assert r.status_code == 201
    return r.json()["file_id"]


@pytest.fixture
def summary_id(client, fake_summarizer, uploaded_file_id) -> str:
    r = client.post(
        "/api/summary/generate",
        json={"file_id": uploaded_file_id, "prompt": "action items"},
    )
    assert r.status_code == 201
    return r.json()["summary"]["id"]
