"""Convert request/response pairs to transaction documents and back.

Bodies are stored in the most readable form that still round-trips
exactly: text stays text, JSON values are embedded as JSON, and raw
bytes are base64-encoded. A body that cannot be represented raises
BodySerializationError without affecting anything already captured.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pydantic import ValidationError

from reprise.errors import BodySerializationError, TransactionSerializationError
from reprise.http.base import HttpRequest, HttpResponse
from reprise.recording.models import (
    CURRENT_SCHEMA_VERSION,
    EncodedBody,
    RequestDocument,
    ResponseDocument,
    TransactionDocument,
)


def encode_body(body: Any) -> EncodedBody:
    """Encode a body for storage.

    Args:
        body: None, str, bytes/bytearray, or a JSON-compatible value.

    Returns:
        The EncodedBody for the value.

    Raises:
        BodySerializationError: If the body is neither text, bytes nor
            strictly JSON-serializable (circular references, arbitrary
            objects, NaN/Infinity all fail).
    """
    if body is None:
        return EncodedBody(kind="empty")
    if isinstance(body, str):
        return EncodedBody(kind="text", value=body)
    if isinstance(body, (bytes, bytearray)):
        return EncodedBody(
            kind="base64", value=base64.b64encode(bytes(body)).decode("ascii")
        )

    try:
        normalized = json.loads(json.dumps(body, allow_nan=False))
    except (TypeError, ValueError, RecursionError) as exc:
        raise BodySerializationError(type(body).__name__, exc) from exc
    return EncodedBody(kind="json", value=normalized)


def decode_body(encoded: EncodedBody) -> Any:
    """Inverse of encode_body().

    Raises:
        ValueError: If a base64 value is malformed or a text value is
            not a string.
    """
    if encoded.kind == "empty":
        return None
    if encoded.kind == "text":
        if not isinstance(encoded.value, str):
            raise ValueError("text body value must be a string")
        return encoded.value
    if encoded.kind == "base64":
        try:
            return base64.b64decode(encoded.value, validate=True)
        except (binascii.Error, TypeError) as exc:
            raise ValueError(f"invalid base64 body: {exc}") from exc
    return encoded.value


class TransactionSerializer:
    """Serialize request/response pairs into TransactionDocuments.

    dumps()/loads() handle the text form written to disk; serialize()
    and deserialize() handle the document <-> dataclass mapping.
    """

    def serialize(self, request: HttpRequest, response: HttpResponse) -> TransactionDocument:
        """Build a TransactionDocument from a request/response pair.

        Raises:
            BodySerializationError: If either body cannot be encoded.
            TransactionSerializationError: If the method, URL, status or
                headers do not fit the document schema (e.g. a non-str
                header value).
        """
        request_body = encode_body(request.body)
        response_body = encode_body(response.body)
        try:
            return TransactionDocument(
                schema_version=CURRENT_SCHEMA_VERSION,
                request=RequestDocument(
                    method=request.method,
                    url=request.url,
                    headers=dict(request.headers),
                    body=request_body,
                ),
                response=ResponseDocument(
                    status=response.status,
                    headers=dict(response.headers),
                    body=response_body,
                ),
            )
        except ValidationError as exc:
            raise TransactionSerializationError("serialize", exc) from exc

    def deserialize(self, document: TransactionDocument) -> tuple[HttpRequest, HttpResponse]:
        """Rebuild the request/response pair stored in a document.

        Raises:
            TransactionSerializationError: If the document's schema
                version is unsupported or a body cannot be decoded.
        """
        _check_schema_version(document)
        try:
            request_body = decode_body(document.request.body)
            response_body = decode_body(document.response.body)
        except ValueError as exc:
            raise TransactionSerializationError("deserialize", exc) from exc

        request = HttpRequest(
            method=document.request.method,
            url=document.request.url,
            headers=dict(document.request.headers),
            body=request_body,
        )
        response = HttpResponse(
            status=document.response.status,
            headers=dict(document.response.headers),
            body=response_body,
        )
        return request, response

    def dumps(self, document: TransactionDocument) -> str:
        """Render a document as pretty-printed JSON text."""
        return json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)

    def loads(self, content: str) -> TransactionDocument:
        """Parse and validate document text.

        Raises:
            TransactionSerializationError: If the text is not valid JSON or
                does not match the document schema, or if its schema
                version is newer than supported.
        """
        try:
            document = TransactionDocument.model_validate_json(content)
        except ValidationError as exc:
            raise TransactionSerializationError("deserialize", exc) from exc
        _check_schema_version(document)
        return document


def _check_schema_version(document: TransactionDocument) -> None:
    if document.schema_version > CURRENT_SCHEMA_VERSION:
        raise TransactionSerializationError(
            "deserialize",
            ValueError(
                f"schema version {document.schema_version} is newer than "
                f"supported version {CURRENT_SCHEMA_VERSION}"
            ),
        )
