from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .documents import StoredDocument


class MeetingRecord(BaseModel):
    """
    One document of the ``meetings`` collection. Every field is optional so that
    partially written documents still validate; unknown fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    datetime: str | dt.datetime | None = None
    duration: int | float | None = None
    ownerUid: str | None = None
    participants: list[str] | None = None
    status: str | None = None
    location: str | None = None

    def to_record(self) -> dict[str, Any]:
        # None means "not set", so it is left out rather than written as nullValue.
        return self.model_dump(exclude_none=True)


class StoredMeeting(BaseModel):
    id: str
    name: str
    meeting: MeetingRecord = Field(default_factory=MeetingRecord)
    create_time: dt.datetime | None = None
    update_time: dt.datetime | None = None

    @classmethod
    def from_document(cls, doc: StoredDocument) -> "StoredMeeting":
        return cls(
            id=doc.id,
            name=doc.name,
            meeting=MeetingRecord.model_validate(doc.to_record()),
            create_time=doc.create_time,
            update_time=doc.update_time,
        )
