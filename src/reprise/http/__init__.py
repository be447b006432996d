"""HTTP client interface and the httpx-backed transport."""

from reprise.http.base import BaseHttpClient, HttpRequest, HttpResponse
from reprise.http.httpx_client import HttpxClient

__all__ = [
    "BaseHttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
]
