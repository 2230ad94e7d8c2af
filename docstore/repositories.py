from __future__ import annotations

import logging
from typing import Any, Protocol

from .documents import DocumentList, StoredDocument
from .interfaces import FULL_REPLACE, AsyncDocumentStore, PartialReplace
from .meetings import MeetingRecord, StoredMeeting
from .rest_client import RequestError

logger = logging.getLogger(__name__)


class AsyncMeetingRepository(Protocol):
    """
    Domain-level meeting persistence interface.
    Mirrors the raw CRUD calls one to one, but speaks MeetingRecord.
    """

    async def create_meeting(self, meeting: MeetingRecord, meeting_id: str | None = None) -> StoredMeeting: ...
    async def get_meeting(self, meeting_id: str) -> StoredMeeting | None: ...
    async def list_meetings(self) -> list[StoredMeeting]: ...

    async def replace_meeting(self, meeting_id: str, meeting: MeetingRecord) -> StoredMeeting: ...
    async def patch_meeting(self, meeting_id: str, **fields: Any) -> StoredMeeting: ...

    async def delete_meeting(self, meeting_id: str) -> None: ...


class AsyncFirestoreMeetingRepository(AsyncMeetingRepository):
    """
    Firestore-backed MeetingRepository.

    Implementation detail: every call is exactly one request on the underlying
    document store; responses are decoded from the wire format into StoredMeeting.
    """

    def __init__(self, store: AsyncDocumentStore) -> None:
        self._store = store

    async def create_meeting(self, meeting: MeetingRecord, meeting_id: str | None = None) -> StoredMeeting:
        raw = await self._store.create(meeting.to_record(), meeting_id)
        return self._to_meeting(raw)

    async def get_meeting(self, meeting_id: str) -> StoredMeeting | None:
        try:
            raw = await self._store.get(meeting_id)
        except RequestError as e:
            if e.status_code == 404:
                return None
            raise
        return self._to_meeting(raw)

    async def list_meetings(self) -> list[StoredMeeting]:
        raw = await self._store.list()
        meetings: list[StoredMeeting] = []
        for doc in DocumentList.from_api_doc(raw).documents:
            # One foreign-shaped document must not hide the rest of the collection.
            try:
                meetings.append(StoredMeeting.from_document(doc))
            except ValueError as e:  # pydantic ValidationError, WireFormatError
                logger.warning("MEETINGS LIST: skipping %s: %r", doc.name, e)
        return meetings

    async def replace_meeting(self, meeting_id: str, meeting: MeetingRecord) -> StoredMeeting:
        raw = await self._store.update(meeting_id, meeting.to_record(), FULL_REPLACE)
        return self._to_meeting(raw)

    async def patch_meeting(self, meeting_id: str, **fields: Any) -> StoredMeeting:
        # Validate field types through the model, but keep explicit Nones: a masked
        # field sent as null is stored as null.
        validated = MeetingRecord.model_validate(fields).model_dump(include=set(fields))
        raw = await self._store.update(meeting_id, validated, PartialReplace(fields))
        return self._to_meeting(raw)

    async def delete_meeting(self, meeting_id: str) -> None:
        await self._store.delete(meeting_id)

    @staticmethod
    def _to_meeting(raw: Any) -> StoredMeeting:
        return StoredMeeting.from_document(StoredDocument.from_api_doc(raw or {}))
