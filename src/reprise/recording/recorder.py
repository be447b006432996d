"""HttpRecorder: a client decorator that records every call to disk.

Each call goes through the wrapped client for real. The request and
response are then passed through the redaction pipeline, stamped with a
fresh transaction id and written via the TransactionStore. The caller
always gets the original, unredacted response back.

Recording is best effort. A persistence or redaction failure is logged
and handed to the optional on_error callback but never fails the HTTP
call itself.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from reprise.errors import (
    InvalidTransactionIdError,
    PersistenceError,
    RedactionError,
    RepriseError,
)
from reprise.http.base import BaseHttpClient, HttpRequest, HttpResponse
from reprise.recording.ids import TransactionIdFactory
from reprise.recording.models import RecordedTransaction, RedactionContext
from reprise.recording.redaction import Redactor, apply_redaction

if TYPE_CHECKING:
    from reprise.storage.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class HttpRecorder(BaseHttpClient):
    """Record request/response pairs made through a wrapped client.

    Args:
        inner: The real client that performs the request.
        store: Where recorded transactions are written.
        redactor: Content redactor; None disables content redaction.
        excluded_headers: Header names never written to disk
            (case-insensitive). Applied even when redactor is None.
        id_factory: Source of transaction ids. Share one factory between
            recorders writing to the same directory.
        on_error: Called with each recording error, in addition to
            logging it.

    recorded_ids and errors keep every id written and every error seen
    for the life of the recorder. Call clear_history() between test
    cases when one recorder is shared by a long session.
    """

    def __init__(
        self,
        inner: BaseHttpClient,
        store: "TransactionStore",
        redactor: Redactor | None = None,
        excluded_headers: Iterable[str] = (),
        id_factory: TransactionIdFactory | None = None,
        on_error: Callable[[RepriseError], None] | None = None,
    ) -> None:
        self.inner = inner
        self.store = store
        self.redactor = redactor
        self.excluded_headers = tuple(excluded_headers)
        self.id_factory = id_factory or TransactionIdFactory()
        self.on_error = on_error
        self.recorded_ids: list[str] = []
        self.errors: list[RepriseError] = []
        self._ready = False

    async def send(self, request: HttpRequest) -> HttpResponse:
        response = await self.inner.send(request)

        try:
            transaction = self._build_transaction(request, response)
            await asyncio.to_thread(self._persist, transaction)
        except (PersistenceError, InvalidTransactionIdError, RedactionError) as exc:
            self._report(request, exc)
        else:
            self.recorded_ids.append(transaction.id)
            logger.debug("Recorded %s %s as %s", request.method, request.url, transaction.id)

        return response

    async def aclose(self) -> None:
        await self.inner.aclose()

    def clear_history(self) -> None:
        """Forget recorded ids and collected errors. Files on disk are kept."""
        self.recorded_ids.clear()
        self.errors.clear()

    def _build_transaction(
        self, request: HttpRequest, response: HttpResponse
    ) -> RecordedTransaction:
        """Redact both sides of a call and wrap them in a new transaction."""
        request_context = self._redact(
            RedactionContext(
                method=request.method,
                url=request.url,
                headers=request.headers,
                body=request.body,
                type="request",
            )
        )
        response_context = self._redact(
            RedactionContext(
                method=request.method,
                url=request.url,
                headers=response.headers,
                body=response.body,
                type="response",
                status=response.status,
            )
        )

        return RecordedTransaction(
            id=self.id_factory.new_id(request.method, request.url),
            request=HttpRequest(
                method=request.method.upper(),
                url=request.url,
                headers=dict(request_context.headers),
                body=request_context.body,
            ),
            response=HttpResponse(
                status=response.status,
                headers=dict(response_context.headers),
                body=response_context.body,
            ),
        )

    def _redact(self, context: RedactionContext) -> RedactionContext:
        """Run the redaction pipeline, wrapping redactor failures."""
        try:
            return apply_redaction(context, self.redactor, self.excluded_headers)
        except Exception as exc:
            raise RedactionError(context.type, exc) from exc

    def _persist(self, transaction: RecordedTransaction) -> None:
        if not self._ready:
            self.store.ensure_ready()
            self._ready = True
        self.store.write(transaction)

    def _report(self, request: HttpRequest, error: RepriseError) -> None:
        self.errors.append(error)
        logger.warning(
            "Failed to record %s %s: %s", request.method, request.url, error
        )
        if self.on_error is not None:
            self.on_error(error)
