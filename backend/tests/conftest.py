"""Shared test fixtures and configuration."""
import pytest


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set required environment variables for all tests."""
    monkeypatch.setenv("GCP_PROJECT_ID", "test-project")
    monkeypatch.setenv("BLOB_BUCKET", "avatars")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
