"""HttpReplayer: a client that answers from recorded transactions.

Loads the recordings directory once, on first use, and serves every call
from the stored transaction whose method and URL match exactly. It never
touches the network. A call with no matching recording fails with
TransactionNotFoundError naming the method and URL that were requested.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from reprise.errors import TransactionNotFoundError
from reprise.http.base import BaseHttpClient, HttpRequest, HttpResponse

if TYPE_CHECKING:
    from reprise.recording.models import RecordedTransaction
    from reprise.storage.transaction_store import LoadFailure, TransactionStore

logger = logging.getLogger(__name__)

MatchKey = tuple[str, str]


class HttpReplayer(BaseHttpClient):
    """Serve HTTP calls from a TransactionStore.

    By default matching is idempotent: repeated identical calls all get
    the first (oldest) matching recording. With sequential=True each
    recording is consumed once, so repeated calls walk through the
    matching recordings in the order they were made.

    Args:
        store: The store to replay from.
        sequential: Consume matching recordings one call at a time.
    """

    def __init__(self, store: "TransactionStore", sequential: bool = False) -> None:
        self.store = store
        self.sequential = sequential
        self._index: dict[MatchKey, list["RecordedTransaction"]] | None = None
        self._cursors: dict[MatchKey, int] = defaultdict(int)
        self._load_failures: list["LoadFailure"] = []
        self._load_lock = asyncio.Lock()

    @property
    def load_failures(self) -> list["LoadFailure"]:
        """Corrupt recordings skipped while loading the index."""
        return list(self._load_failures)

    async def send(self, request: HttpRequest) -> HttpResponse:
        index = await self._ensure_index()
        key = _match_key(request.method, request.url)
        candidates = index.get(key, [])

        if self.sequential:
            position = self._cursors[key]
            if position >= len(candidates):
                raise TransactionNotFoundError(request.method, request.url)
            self._cursors[key] = position + 1
            transaction = candidates[position]
        else:
            if not candidates:
                raise TransactionNotFoundError(request.method, request.url)
            transaction = candidates[0]

        return copy.deepcopy(transaction.response)

    async def load(self) -> int:
        """Load the index now instead of on the first call.

        Returns:
            Number of transactions available for replay.
        """
        index = await self._ensure_index()
        return sum(len(entries) for entries in index.values())

    def reload(self) -> None:
        """Drop the cached index and sequential cursors."""
        self._index = None
        self._cursors.clear()
        self._load_failures = []

    async def _ensure_index(self) -> dict[MatchKey, list["RecordedTransaction"]]:
        """Build the index once; concurrent first callers share the result."""
        if self._index is not None:
            return self._index

        async with self._load_lock:
            if self._index is None:
                result = await asyncio.to_thread(self.store.load_all)
                index: dict[MatchKey, list["RecordedTransaction"]] = {}
                for transaction in result.transactions:
                    key = _match_key(transaction.request.method, transaction.request.url)
                    index.setdefault(key, []).append(transaction)
                for failure in result.failures:
                    logger.warning(
                        "Skipping unreadable recording %s: %s", failure.path, failure.error
                    )
                self._load_failures = list(result.failures)
                self._index = index
        return self._index


def _match_key(method: str, url: str) -> MatchKey:
    return (method.upper(), url)
