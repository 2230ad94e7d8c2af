from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Any, Callable

import httpx
import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import docstore...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


BASE_URL = "https://firestore.test/v1/projects/demo/databases/(default)/documents/meetings"


class FakeFirestore:
    """
    Records every request and answers from a queue of canned responses
    (default: 200 with an empty JSON object).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response] = []

    def queue(self, status_code: int = 200, json_body: Any = None, **kwargs: Any) -> None:
        if json_body is not None:
            kwargs["json"] = json_body
        self._responses.append(httpx.Response(status_code, **kwargs))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={})

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def make_client(fake_firestore: FakeFirestore) -> Callable[..., Any]:
    """
    Build a DocumentClient wired to the fake transport.
    Call inside the coroutine under test so the AsyncClient lives on that loop.
    """
    from docstore.rest_client import DocumentClient

    def _make(**kwargs: Any) -> DocumentClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_firestore.handler))
        return DocumentClient(BASE_URL, http_client=http, **kwargs)

    return _make


def stored_doc(doc_id: str, fields: dict[str, Any], *, ts: str = "2025-01-01T10:00:00.123456Z") -> dict[str, Any]:
    return {
        "name": f"projects/demo/databases/(default)/documents/meetings/{doc_id}",
        "fields": fields,
        "createTime": ts,
        "updateTime": ts,
    }
