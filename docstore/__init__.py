from __future__ import annotations

from .documents import DocumentList, StoredDocument
from .interfaces import FULL_REPLACE, AsyncDocumentStore, FullReplace, PartialReplace, UpdateMode
from .meetings import MeetingRecord, StoredMeeting
from .repositories import AsyncFirestoreMeetingRepository, AsyncMeetingRepository
from .rest_client import DocumentClient, RequestError
from .values import ValueKind, WireFormatError, classify, decode, decode_fields, encode, encode_record

__all__ = [
    "AsyncDocumentStore",
    "DocumentClient",
    "RequestError",
    "FullReplace",
    "PartialReplace",
    "UpdateMode",
    "FULL_REPLACE",
    "StoredDocument",
    "DocumentList",
    "MeetingRecord",
    "StoredMeeting",
    "AsyncMeetingRepository",
    "AsyncFirestoreMeetingRepository",
    "ValueKind",
    "WireFormatError",
    "classify",
    "encode",
    "encode_record",
    "decode",
    "decode_fields",
]
