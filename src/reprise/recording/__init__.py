"""Recording subpackage: id codec, redaction, serialization, record and replay.

Provides the transaction id/slug codec, the redaction pipeline, the
transaction serializer, and the HttpRecorder/HttpReplayer client
decorators.
"""

from reprise.recording.ids import (
    DecodedId,
    TransactionIdFactory,
    create_id,
    decode_id,
    slug_for_url,
    to_slug,
)
from reprise.recording.models import (
    CURRENT_SCHEMA_VERSION,
    EncodedBody,
    RecordedTransaction,
    RedactionContext,
    TransactionDocument,
)
from reprise.recording.recorder import HttpRecorder
from reprise.recording.redaction import (
    ComposedRedactor,
    ConditionalRedactor,
    HeaderMaskRedactor,
    IdentityRedactor,
    JsonPathRedactor,
    PatternRedactor,
    Redactor,
    apply_redaction,
    build_redactor,
    request_only,
    response_only,
    strip_excluded_headers,
)
from reprise.recording.replayer import HttpReplayer
from reprise.recording.serializer import TransactionSerializer

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "ComposedRedactor",
    "ConditionalRedactor",
    "DecodedId",
    "EncodedBody",
    "HeaderMaskRedactor",
    "HttpRecorder",
    "HttpReplayer",
    "IdentityRedactor",
    "JsonPathRedactor",
    "PatternRedactor",
    "RecordedTransaction",
    "RedactionContext",
    "Redactor",
    "TransactionDocument",
    "TransactionIdFactory",
    "TransactionSerializer",
    "apply_redaction",
    "build_redactor",
    "create_id",
    "decode_id",
    "request_only",
    "response_only",
    "slug_for_url",
    "strip_excluded_headers",
    "to_slug",
]
