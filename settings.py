from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    # Firestore location
    api_base_url: str
    project_id: str
    database_id: str
    collection: str

    # Auth (static bearer token, no refresh)
    bearer_token: str | None

    # Debug
    debug_log_requests: bool
    debug_log_tokens: bool
    log_level: str

    @property
    def collection_url(self) -> str:
        return (
            f"{self.api_base_url}/projects/{self.project_id}"
            f"/databases/{self.database_id}/documents/{self.collection}"
        )


def get_settings() -> Settings:
    api_base_url = (os.getenv("FIRESTORE_API_BASE", "https://firestore.googleapis.com/v1")).rstrip("/")
    project_id = os.getenv("PROJECT_ID", "smart-meeting-assistant-1a3c8").strip()
    database_id = os.getenv("FIRESTORE_DATABASE", "(default)").strip()
    collection = os.getenv("FIRESTORE_COLLECTION", "meetings").strip("/ ")

    # Unset means requests go out unauthenticated (works against the emulator / open rules).
    bearer_token = _env_str("FIRESTORE_TOKEN")

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)
    debug_log_tokens = _env_bool("DEBUG_LOG_TOKENS", False)
    log_level = (os.getenv("LOG_LEVEL", "INFO")).strip().upper() or "INFO"

    return Settings(
        api_base_url=api_base_url,
        project_id=project_id,
        database_id=database_id,
        collection=collection,
        bearer_token=bearer_token,
        debug_log_requests=debug_log_requests,
        debug_log_tokens=debug_log_tokens,
        log_level=log_level,
    )
