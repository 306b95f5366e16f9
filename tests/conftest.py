"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from notion_client import APIResponseError

from notion_desk.app import app
from notion_desk.config import get_settings
from notion_desk.notion.pages import invalidate_title_property_cache


@pytest.fixture(autouse=True)
def api_keys(monkeypatch):
    """Configure both API keys and rebuild the cached settings for every test."""
    monkeypatch.setenv("NOTION_API_KEY", "secret_test")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-test")
    get_settings.cache_clear()
    invalidate_title_property_cache()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def notion_error():
    """Factory for notion_client APIResponseError instances with a given code."""

    def _make(code: str, message: str = "Upstream failure", status: int = 400) -> APIResponseError:
        error = APIResponseError.__new__(APIResponseError)
        Exception.__init__(error, message)
        error.code = code
        error.status = status
        return error

    return _make
