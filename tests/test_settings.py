from __future__ import annotations

from settings import get_settings


def test_defaults(monkeypatch):
    for name in (
        "FIRESTORE_API_BASE",
        "PROJECT_ID",
        "FIRESTORE_DATABASE",
        "FIRESTORE_COLLECTION",
        "FIRESTORE_TOKEN",
        "DEBUG_LOG_REQUESTS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    s = get_settings()
    assert s.collection_url == (
        "https://firestore.googleapis.com/v1/projects/smart-meeting-assistant-1a3c8"
        "/databases/(default)/documents/meetings"
    )
    assert s.bearer_token is None
    assert s.debug_log_requests is False
    assert s.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("FIRESTORE_API_BASE", "http://localhost:8080/v1/")
    monkeypatch.setenv("PROJECT_ID", "p1")
    monkeypatch.setenv("FIRESTORE_COLLECTION", "rooms")
    monkeypatch.setenv("FIRESTORE_TOKEN", "  ")
    monkeypatch.setenv("DEBUG_LOG_REQUESTS", "yes")

    s = get_settings()
    assert s.collection_url == "http://localhost:8080/v1/projects/p1/databases/(default)/documents/rooms"
    # blank token counts as unset
    assert s.bearer_token is None
    assert s.debug_log_requests is True
