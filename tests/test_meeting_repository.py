from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from conftest import stored_doc
from docstore.meetings import MeetingRecord
from docstore.repositories import AsyncFirestoreMeetingRepository
from docstore.rest_client import RequestError


MEETING_FIELDS = {
    "title": {"stringValue": "Demo"},
    "duration": {"integerValue": "45"},
    "participants": {"arrayValue": {"values": [{"stringValue": "a@x.com"}]}},
    "status": {"stringValue": "scheduled"},
}


def test_meeting_repository_basic_flow(fake_firestore, make_client):
    async def _run():
        async with make_client() as client:
            repo = AsyncFirestoreMeetingRepository(client)

            fake_firestore.queue(200, stored_doc("mtg_1", MEETING_FIELDS))
            created = await repo.create_meeting(
                MeetingRecord(title="Demo", duration=45, participants=["a@x.com"], status="scheduled"),
                "mtg_1",
            )
            assert created.id == "mtg_1"
            assert created.meeting.duration == 45
            assert created.meeting.participants == ["a@x.com"]
            assert created.create_time == datetime(2025, 1, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)

            fake_firestore.queue(200, stored_doc("mtg_1", MEETING_FIELDS))
            got = await repo.get_meeting("mtg_1")
            assert got is not None
            assert got.meeting.title == "Demo"

            fake_firestore.queue(200, {"documents": [stored_doc("mtg_1", MEETING_FIELDS), stored_doc("mtg_2", {})]})
            listed = await repo.list_meetings()
            assert [m.id for m in listed] == ["mtg_1", "mtg_2"]
            assert listed[1].meeting.title is None

            fake_firestore.queue(200, {"documents": []})
            fake_firestore.queue(200, {})
            assert await repo.list_meetings() == []
            assert await repo.list_meetings() == []

    asyncio.run(_run())

    create_req = fake_firestore.requests[0]
    assert create_req.url.params["documentId"] == "mtg_1"
    # unset fields are not written as nulls
    assert set(fake_firestore.body(0)["fields"]) == {"title", "duration", "participants", "status"}


def test_get_meeting_returns_none_on_404_only(fake_firestore, make_client):
    async def _run():
        async with make_client() as client:
            repo = AsyncFirestoreMeetingRepository(client)
            fake_firestore.queue(404, {"error": {"status": "NOT_FOUND"}})
            assert await repo.get_meeting("missing") is None

            fake_firestore.queue(403, {"error": {"status": "PERMISSION_DENIED"}})
            await repo.get_meeting("secret")

    with pytest.raises(RequestError) as exc_info:
        asyncio.run(_run())
    assert exc_info.value.status_code == 403


def test_replace_and_patch_meeting(fake_firestore, make_client):
    async def _run():
        async with make_client() as client:
            repo = AsyncFirestoreMeetingRepository(client)
            fake_firestore.queue(200, stored_doc("mtg_1", {"title": {"stringValue": "New"}}))
            replaced = await repo.replace_meeting("mtg_1", MeetingRecord(title="New"))
            assert replaced.meeting.title == "New"

            fake_firestore.queue(200, stored_doc("mtg_1", {"status": {"stringValue": "rescheduled"}}))
            patched = await repo.patch_meeting("mtg_1", status="rescheduled", location=None)
            assert patched.meeting.status == "rescheduled"

            await repo.delete_meeting("mtg_1")

    asyncio.run(_run())

    replace_req, patch_req, delete_req = fake_firestore.requests
    assert "updateMask.fieldPaths" not in replace_req.url.params
    assert fake_firestore.body(0) == {"fields": {"title": {"stringValue": "New"}}}

    assert patch_req.url.params.get_list("updateMask.fieldPaths") == ["status", "location"]
    assert fake_firestore.body(1) == {
        "fields": {"status": {"stringValue": "rescheduled"}, "location": {"nullValue": None}}
    }

    assert delete_req.method == "DELETE"


def test_meeting_datetime_may_be_a_timestamp():
    when = datetime(2025, 5, 1, 8, 0, tzinfo=timezone.utc)
    record = MeetingRecord(title="x", datetime=when).to_record()
    assert record == {"title": "x", "datetime": when}


def test_list_meetings_tolerates_foreign_shaped_documents(fake_firestore, make_client, caplog):
    async def _run():
        async with make_client() as client:
            repo = AsyncFirestoreMeetingRepository(client)
            fake_firestore.queue(
                200,
                {
                    "documents": [
                        stored_doc("mtg_1", {"duration": {"doubleValue": 45.5}}),
                        stored_doc("mtg_2", {"participants": {"mapValue": {"fields": {"a": {"stringValue": "x"}}}}}),
                        stored_doc("mtg_3", MEETING_FIELDS),
                    ]
                },
            )
            return await repo.list_meetings()

    with caplog.at_level(logging.WARNING, logger="docstore.repositories"):
        listed = asyncio.run(_run())

    assert [m.id for m in listed] == ["mtg_1", "mtg_3"]
    assert listed[0].meeting.duration == 45.5
    assert any("mtg_2" in r.getMessage() for r in caplog.records)
