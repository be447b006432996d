"""Models for recorded transactions and the redaction context.

The on-disk document is a set of pydantic models so it can be validated
on load. RedactionContext and RecordedTransaction are frozen dataclasses
that live only in memory.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, Field

from reprise.http.base import HttpRequest, HttpResponse
from reprise.recording.ids import DecodedId, decode_id

# Current schema version for transaction files.
CURRENT_SCHEMA_VERSION = 1

BodyKind = Literal["empty", "text", "json", "base64"]


class EncodedBody(BaseModel):
    """A body in storable form.

    kind says how value must be read back: 'empty' has no value, 'text'
    is a str, 'json' is any JSON value and 'base64' is base64-encoded
    bytes.
    """

    model_config = {"extra": "forbid"}

    kind: BodyKind = "empty"
    value: Any = None


class RequestDocument(BaseModel):
    """The request side of a stored transaction."""

    model_config = {"extra": "forbid"}

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: EncodedBody = Field(default_factory=EncodedBody)


class ResponseDocument(BaseModel):
    """The response side of a stored transaction."""

    model_config = {"extra": "forbid"}

    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: EncodedBody = Field(default_factory=EncodedBody)


class TransactionDocument(BaseModel):
    """A complete transaction file."""

    model_config = {"extra": "forbid"}

    schema_version: int = CURRENT_SCHEMA_VERSION
    request: RequestDocument
    response: ResponseDocument


@dataclass(frozen=True)
class RedactionContext:
    """What a redactor sees for one side of a call.

    Built once for the request and once for the response. status is only
    set when type is 'response'. headers is exposed as a read-only
    mapping; use with_changes() to produce a redacted copy.
    """

    method: str
    url: str
    headers: Mapping[str, str]
    type: Literal["request", "response"]
    body: Any = None
    status: int | None = None

    def __post_init__(self) -> None:
        if self.type == "request" and self.status is not None:
            raise ValueError("status is only allowed on response contexts")
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def with_changes(self, **changes: Any) -> RedactionContext:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class RecordedTransaction:
    """One recorded request/response pair, identified by its transaction id."""

    id: str
    request: HttpRequest
    response: HttpResponse
    _decoded: DecodedId = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_decoded", decode_id(self.id))

    @property
    def timestamp(self) -> int:
        """Recording time in unix milliseconds, taken from the id."""
        return self._decoded.timestamp

    @property
    def recorded_at(self) -> datetime:
        """Recording time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    @property
    def slug(self) -> str:
        return self._decoded.slug

    def matches(self, method: str, url: str) -> bool:
        """Exact method + URL match used for replay lookup."""
        return self.request.method.upper() == method.upper() and self.request.url == url
