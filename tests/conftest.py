"""Shared pytest fixtures for the Larder test suite."""

from __future__ import annotations

from typing import Generator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from larder.config import get_settings
from larder.db.repository import reset_repository_state
from larder.server.app import create_app


class FakeTextGenerator:
    """Stand-in for ``TextGenerator`` that replays canned replies."""

    def __init__(self, replies: List[str] | None = None, *, available: bool = True, error=None):
        self.replies = list(replies or [])
        self.available = available
        self.provider = "fake"
        self.status_message = "fake ready" if available else "fake not configured"
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.replies:
            return ""
        return self.replies.pop(0)


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def fake_generator_factory():
    return FakeTextGenerator


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_larder.db"
    monkeypatch.setenv("LARDER_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("LARDER_API_TOKEN", raising=False)
    monkeypatch.delenv("LARDER_LLM_API_KEY", raising=False)
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("LARDER_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
