"""httpx transport for the reprise client interface.

Converts HttpRequest into an httpx request and decodes the httpx response
back into an HttpResponse. Response bodies are decoded as JSON when
possible, then as text, and kept as raw bytes otherwise, so recordings
of JSON APIs stay readable on disk.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from reprise.http.base import BaseHttpClient, HttpRequest, HttpResponse


def decode_response_body(content: bytes, encoding: str | None = None) -> Any:
    """Decode raw response bytes into the richest representation available.

    Args:
        content: The raw response body.
        encoding: Charset advertised by the response, if any.

    Returns:
        None for an empty body, the parsed JSON value if the body is valid
        JSON, the decoded text if it is valid text, else the raw bytes.
    """
    if not content:
        return None

    try:
        text = content.decode(encoding or "utf-8")
    except (UnicodeDecodeError, LookupError):
        return content

    try:
        return json.loads(text)
    except ValueError:
        return text


class HttpxClient(BaseHttpClient):
    """BaseHttpClient backed by httpx.AsyncClient.

    An existing AsyncClient can be passed in (e.g. one configured with a
    base URL, auth or a mock transport). Otherwise one is created lazily
    on first use and closed by aclose().
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily initialize and return the AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def _build_kwargs(self, request: HttpRequest) -> dict[str, Any]:
        """Map an HttpRequest body onto httpx request keyword arguments."""
        kwargs: dict[str, Any] = {"headers": request.headers}
        body = request.body
        if body is None:
            return kwargs
        if isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif isinstance(body, bytearray):
            kwargs["content"] = bytes(body)
        else:
            kwargs["json"] = body
        return kwargs

    async def send(self, request: HttpRequest) -> HttpResponse:
        client = self._get_client()
        response = await client.request(
            request.method.upper(),
            request.url,
            **self._build_kwargs(request),
        )
        return HttpResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=decode_response_body(response.content, response.charset_encoding),
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
