from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, Field

from .values import decode_fields, parse_timestamp


class StoredDocument(BaseModel):
    """
    Mirrors the store's Document resource:
      {
        "name": "projects/<p>/databases/<d>/documents/<collection>/<id>",
        "fields": { "<field>": { "<kind>Value": ... } },
        "createTime": "2025-01-01T00:00:00.123456Z",
        "updateTime": "2025-01-01T00:00:00.123456Z"
      }
    """

    name: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    createTime: str | None = None
    updateTime: str | None = None

    @classmethod
    def from_api_doc(cls, doc: Mapping[str, Any]) -> "StoredDocument":
        return cls.model_validate(doc)

    @property
    def id(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @property
    def create_time(self) -> datetime | None:
        return parse_timestamp(self.createTime) if self.createTime else None

    @property
    def update_time(self) -> datetime | None:
        return parse_timestamp(self.updateTime) if self.updateTime else None

    def to_record(self) -> dict[str, Any]:
        return decode_fields(self.fields)


class DocumentList(BaseModel):
    """
    Mirrors the list response. An empty collection comes back as ``{}``.
    Only the first page is ever read; ``nextPageToken`` is kept for visibility.
    """

    documents: list[StoredDocument] = Field(default_factory=list)
    nextPageToken: str | None = None

    @classmethod
    def from_api_doc(cls, doc: Mapping[str, Any] | None) -> "DocumentList":
        return cls.model_validate(doc or {})
