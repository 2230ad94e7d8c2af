from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import quote

import httpx

from .interfaces import FULL_REPLACE, AsyncDocumentStore, PartialReplace, UpdateMode
from .values import encode_record

if TYPE_CHECKING:
    from settings import Settings

logger = logging.getLogger(__name__)


class RequestError(Exception):
    """The store answered with a non-2xx status."""

    def __init__(self, method: str, url: str, status_code: int, reason_phrase: str, body: str = ""):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.body = body
        super().__init__(f"{method} {url} -> {status_code} {reason_phrase}\n{body}")


def _mask_token(token: str, *, head: int = 8, tail: int = 4) -> str:
    if not token:
        return ""
    if len(token) <= head + tail + 3:
        return "***"
    return f"{token[:head]}...{token[-tail:]}"


async def _read_body_text(response: httpx.Response) -> str:
    # Best-effort: never let a body read failure hide the status error.
    try:
        await response.aread()
        return response.text
    except (httpx.HTTPError, httpx.StreamError, UnicodeDecodeError):
        logger.debug("FIRESTORE: failed to read error body", exc_info=True)
        return ""


def _top_level_field(path: str) -> str:
    """First segment of a field path; `quoted` segments may contain dots."""
    if not path.startswith("`"):
        return path.split(".", 1)[0]
    chars: list[str] = []
    i = 1
    while i < len(path):
        c = path[i]
        if c == "\\" and i + 1 < len(path):
            chars.append(path[i + 1])
            i += 2
            continue
        if c == "`":
            break
        chars.append(c)
        i += 1
    return "".join(chars)


class DocumentClient(AsyncDocumentStore):
    """
    Firestore REST client for a single collection.

    - One request per call: no retries, no token refresh.
    - Non-2xx responses raise RequestError.
    - Returns the parsed JSON body, or None when the response is not JSON.
    """

    def __init__(
        self,
        base_url: str,
        *,
        bearer_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        debug_log_requests: bool = False,
        debug_log_tokens: bool = False,
    ):
        self._base_url = base_url.rstrip("/")
        self._bearer_token = bearer_token or None
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else httpx.AsyncClient()
        self._debug_log_requests = debug_log_requests
        self._debug_log_tokens = debug_log_tokens

    @classmethod
    def from_settings(cls, settings: "Settings", *, http_client: httpx.AsyncClient | None = None) -> "DocumentClient":
        return cls(
            settings.collection_url,
            bearer_token=settings.bearer_token,
            http_client=http_client,
            debug_log_requests=settings.debug_log_requests,
            debug_log_tokens=settings.debug_log_tokens,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "DocumentClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    async def create(self, record: Mapping[str, Any], document_id: str | None = None) -> Any:
        params = {"documentId": document_id} if document_id else None
        return await self._request("POST", self._base_url, params=params, body=encode_record(record))

    async def get(self, document_id: str) -> Any:
        return await self._request("GET", self._document_url(document_id))

    async def list(self) -> Any:
        return await self._request("GET", self._base_url)

    async def update(self, document_id: str, record: Mapping[str, Any], mode: UpdateMode = FULL_REPLACE) -> Any:
        params = None
        if isinstance(mode, PartialReplace):
            missing = [p for p in mode.field_paths if _top_level_field(p) not in record]
            if missing:
                logger.debug("FIRESTORE PATCH: masked paths not in payload (will be cleared): %s", missing)
            params = [("updateMask.fieldPaths", p) for p in mode.field_paths]
        return await self._request("PATCH", self._document_url(document_id), params=params, body=encode_record(record))

    async def delete(self, document_id: str) -> None:
        await self._request("DELETE", self._document_url(document_id))

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def _document_url(self, document_id: str) -> str:
        return f"{self._base_url}/{quote(document_id, safe='')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._bearer_token:
            headers["Authorization"] = f"Bearer {self._bearer_token}"
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Any = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        if self._debug_log_requests:
            if self._debug_log_tokens and self._bearer_token:
                # WARNING: even masked, only use for local debugging.
                logger.debug("FIRESTORE %s: token=%s", method, _mask_token(self._bearer_token))
            logger.debug("FIRESTORE %s: url=%s params=%s body=%s", method, url, params, body)

        request = self._http.build_request(method, url, params=params, json=body, headers=self._headers())
        # Streamed so a failing error body cannot surface before the status check.
        response = await self._http.send(request, stream=True)
        try:
            if self._debug_log_requests:
                logger.debug("FIRESTORE %s: status=%s url=%s", method, response.status_code, response.url)

            if not response.is_success:
                text = await _read_body_text(response)
                logger.info("FIRESTORE %s: %s -> %s", method, response.url, response.status_code)
                raise RequestError(method, str(response.url), response.status_code, response.reason_phrase, text)

            await response.aread()
        finally:
            await response.aclose()

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return None
        return response.json()
