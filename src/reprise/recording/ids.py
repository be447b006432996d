"""Transaction id and slug codec.

A transaction id is "{unix_millis}__{METHOD}_{slug}", e.g.
"1735689600000__GET_users-42". Ids sort chronologically as plain strings
for timestamps of equal width, are safe to use as file names, and show
at a glance which call a recording belongs to. The slug is derived from
the URL path and cannot be turned back into the URL.
"""

from __future__ import annotations

import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from reprise.errors import InvalidTransactionIdError

TRANSACTION_ID_PATTERN: re.Pattern[str] = re.compile(r"^(\d+)__([A-Z]+)_([a-z0-9-]*)$")
SLUG_PATTERN: re.Pattern[str] = re.compile(r"^[a-z0-9-]*$")

_METHOD_PATTERN = re.compile(r"^[A-Za-z]+$")
_DISALLOWED_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATOR_RUNS = re.compile(r"[\s_-]+", re.ASCII)


@dataclass(frozen=True)
class DecodedId:
    """The three parts of a transaction id."""

    timestamp: int
    method: str
    slug: str


def to_slug(raw: str) -> str:
    """Normalize an arbitrary string into a slug.

    Lower-cases and trims, turns '/' into '-', drops anything that is not
    an ASCII word character, whitespace or hyphen, then collapses runs of
    whitespace/underscore/hyphen into a single '-' and trims hyphens from
    both ends. Applying it twice gives the same result as applying it once.

    Args:
        raw: Any string, typically a URL path.

    Returns:
        A string matching ^[a-z0-9-]*$ (possibly empty).
    """
    slug = raw.lower().strip().replace("/", "-")
    slug = _DISALLOWED_CHARS.sub("", slug)
    slug = _SEPARATOR_RUNS.sub("-", slug)
    return slug.strip("-")


def slug_for_url(url: str) -> str:
    """Return the slug for a URL, using only its path.

    The query string and fragment are ignored so that paginated or
    filtered calls to the same endpoint share a readable name.
    """
    return to_slug(urlsplit(url).path)


def create_id(timestamp: int, method: str, slug: str) -> str:
    """Build a transaction id from its parts.

    Args:
        timestamp: Unix time in milliseconds.
        method: HTTP method; upper-cased in the result.
        slug: An already-normalized slug (see to_slug()).

    Returns:
        The transaction id string.

    Raises:
        InvalidTransactionIdError: If any part cannot appear in a valid id.
    """
    candidate = f"{timestamp}__{method.upper()}_{slug}"
    if timestamp < 0:
        raise InvalidTransactionIdError(candidate, "timestamp must not be negative")
    if not _METHOD_PATTERN.fullmatch(method):
        raise InvalidTransactionIdError(candidate, f"method {method!r} must be alphabetic")
    if not SLUG_PATTERN.fullmatch(slug):
        raise InvalidTransactionIdError(candidate, f"slug {slug!r} is not normalized")
    return candidate


def decode_id(transaction_id: str) -> DecodedId:
    """Split a transaction id into timestamp, method and slug.

    Splits on the first '__' and then on the first '_' of the remainder.

    Raises:
        InvalidTransactionIdError: If the string is not a valid id.
    """
    if not TRANSACTION_ID_PATTERN.fullmatch(transaction_id):
        raise InvalidTransactionIdError(
            transaction_id, "expected '{millis}__{METHOD}_{slug}'"
        )
    timestamp, _, rest = transaction_id.partition("__")
    method, _, slug = rest.partition("_")
    return DecodedId(timestamp=int(timestamp), method=method, slug=slug)


def is_transaction_id(value: str) -> bool:
    """Return True if value is a well-formed transaction id."""
    return TRANSACTION_ID_PATTERN.fullmatch(value) is not None


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


class TransactionIdFactory:
    """Generate process-unique, strictly increasing transaction ids.

    Two requests issued within the same millisecond would otherwise get
    the same timestamp and, for the same endpoint, the same id. The
    factory hands out the current millisecond or, if the clock has not
    moved past the last issued value, the last value plus one.
    Safe to call from several threads.
    """

    def __init__(self, clock: Callable[[], int] = _now_millis) -> None:
        self._clock = clock
        self._last = -1
        self._lock = threading.Lock()

    def next_timestamp(self) -> int:
        """Return the next unique millisecond timestamp."""
        with self._lock:
            now = self._clock()
            if now <= self._last:
                now = self._last + 1
            self._last = now
            return now

    def new_id(self, method: str, url: str) -> str:
        """Return a fresh id for a call to method + url."""
        return create_id(self.next_timestamp(), method, slug_for_url(url))
