"""BaseHttpClient ABC and the request/response dataclasses.

Every client in reprise (the real httpx transport, the recorder and the
replayer) subclasses BaseHttpClient and implements send(). Callers can
swap one for another without changing their code.

These are plain dataclasses (not Pydantic) to keep the live request path
free of validation overhead. Persistence goes through the pydantic
document models in reprise.recording.models instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class HttpRequest:
    """An outbound HTTP request.

    body is opaque to the engine: None, str, bytes, or any
    JSON-compatible structure (dict, list, number, bool).
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass
class HttpResponse:
    """An HTTP response as seen by callers of BaseHttpClient.send()."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


class BaseHttpClient(ABC):
    """Abstract base class for HTTP clients.

    Subclasses must implement send(). request() is a convenience wrapper
    that builds the HttpRequest for you.
    """

    @abstractmethod
    async def send(self, request: HttpRequest) -> HttpResponse:
        """Send a request and return its response.

        Args:
            request: The request to send.

        Returns:
            HttpResponse with status, headers and decoded body.
        """
        ...

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: Any = None,
    ) -> HttpResponse:
        """Build an HttpRequest from the arguments and send it."""
        return await self.send(
            HttpRequest(method=method, url=url, headers=dict(headers or {}), body=body)
        )

    async def aclose(self) -> None:
        """Release any resources held by the client. Default is a no-op."""

    def client_name(self) -> str:
        """Return a display name for this client (defaults to the class name)."""
        return type(self).__name__
