from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, Union


@dataclass(frozen=True)
class FullReplace:
    """Overwrite the whole document; fields missing from the payload are removed."""


@dataclass(frozen=True, init=False)
class PartialReplace:
    """
    Overwrite only the named field paths (one ``updateMask.fieldPaths`` per path).

    A masked path that is absent from the payload is deleted by the store.
    """

    field_paths: tuple[str, ...]

    def __init__(self, field_paths: Iterable[str]):
        if isinstance(field_paths, str):
            field_paths = [field_paths]
        # dedupe, keep caller order
        paths = tuple(dict.fromkeys(str(p) for p in field_paths))
        if not paths:
            raise ValueError("PartialReplace requires at least one field path")
        object.__setattr__(self, "field_paths", paths)


UpdateMode = Union[FullReplace, PartialReplace]

FULL_REPLACE = FullReplace()


class AsyncDocumentStore(Protocol):
    """
    Minimal CRUD interface over one collection.

    Records go in as native values; responses come back as the store's JSON
    (or None when the response carries no JSON body).
    """

    async def create(self, record: Mapping[str, Any], document_id: str | None = None) -> Any:
        """Create a document; the store assigns an id when none is given."""
        ...

    async def get(self, document_id: str) -> Any:
        ...

    async def list(self) -> Any:
        """First page of the collection only."""
        ...

    async def update(self, document_id: str, record: Mapping[str, Any], mode: UpdateMode = FULL_REPLACE) -> Any:
        ...

    async def delete(self, document_id: str) -> None:
        ...
