"""
Walks one meeting through the Firestore REST API:

    create -> get -> list -> PATCH full -> PATCH partial -> delete -> list

Configuration comes from the environment (see settings.py); ``local.env`` is
loaded first if present. Set FIRESTORE_TOKEN to an OAuth access token, e.g.
``export FIRESTORE_TOKEN="$(gcloud auth print-access-token)"``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any

from dotenv import load_dotenv

from docstore import FULL_REPLACE, DocumentClient, PartialReplace
from docstore.values import format_timestamp
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def sample_meeting() -> dict[str, Any]:
    return {
        "title": "Demo meeting",
        # Sent as a string on purpose; pass the datetime itself to store a timestampValue.
        "datetime": format_timestamp(datetime.now(tz=timezone.utc)),
        "duration": 45,
        "ownerUid": "user_001",
        "participants": ["ana@x.com", "josh@x.com"],
        "status": "scheduled",
        "location": "Google Meet",
    }


def _dump(label: str, payload: Any) -> None:
    print(f"{label}:", json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def run_demo(client: DocumentClient, *, meeting_id: str | None = None) -> None:
    sample = sample_meeting()
    meeting_id = meeting_id or f"mtg_{uuid.uuid4().hex[:8]}"

    print("== Firestore REST (POST/GET/PATCH/DELETE) ==")
    created = await client.create(sample, meeting_id)
    print("CREATED name:", (created or {}).get("name"))

    _dump("GET", await client.get(meeting_id))
    _dump("GET ALL", await client.list())

    # Full replace (~ PUT)
    updated_full = {**sample, "title": "Demo meeting (PATCH full)", "status": "completed"}
    _dump("PATCH full", await client.update(meeting_id, updated_full, FULL_REPLACE))

    # Partial: only status
    _dump("PATCH partial", await client.update(meeting_id, {"status": "rescheduled"}, PartialReplace(["status"])))

    await client.delete(meeting_id)
    print("DELETE ok")

    _dump("GET ALL AFTER DELETE", await client.list())


async def _amain(settings: Settings) -> None:
    logger.info("DEMO: collection=%s auth=%s", settings.collection_url, "bearer" if settings.bearer_token else "none")
    async with DocumentClient.from_settings(settings) as client:
        await run_demo(client)


def main() -> int:
    load_dotenv("local.env")
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(_amain(settings))
    except Exception:
        logger.exception("DEMO: failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
