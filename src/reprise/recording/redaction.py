"""Redaction pipeline applied to transactions before they are persisted.

A Redactor receives one RedactionContext per side of a call and returns
a context with header values and body possibly replaced. Independently
of the redactor, a configured list of header names is stripped from
both sides before the redactor ever sees them, so excluded headers can
never reach the disk.

Redaction only changes what is written to the recordings directory.
The live response handed back to the caller is never touched.
"""

from __future__ import annotations

import copy
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from reprise.recording.models import RedactionContext

if TYPE_CHECKING:
    from reprise.models.config import RecordingConfig

# Regex patterns that match common secret formats inside text.
REDACTION_PATTERNS: list[str] = [
    r"(?i)bearer\s+[a-zA-Z0-9._-]+",  # Bearer tokens (before general auth pattern)
    r"(?i)basic\s+[a-zA-Z0-9+/=]{8,}",  # Basic auth credentials
    r"sk-ant-[a-zA-Z0-9-]{20,}",  # Anthropic API key values
    r"sk-[a-zA-Z0-9]{20,}",  # OpenAI API key pattern
    r"(?i)(api[_-]?key|secret|password|token|authorization)\s*[:=]\s*[^\s&\"']+",
    r"ghp_[a-zA-Z0-9]{36}",  # GitHub PATs
    r"gho_[a-zA-Z0-9]{36}",  # GitHub OAuth tokens
    r"github_pat_[a-zA-Z0-9_]{22,}",  # GitHub fine-grained PATs
]

_COMPILED_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p) for p in REDACTION_PATTERNS
]

# Header names and JSON keys whose values are always replaced.
_SECRET_KEY_PATTERN = re.compile(
    r"(?i)(api[_-]?key|secret|password|passwd|token|authorization|cookie|credential)"
)

REDACTED_PLACEHOLDER = "[REDACTED]"


class Redactor(ABC):
    """Strategy interface for content redaction.

    Implementations must not mutate the context they receive; return a
    new one via context.with_changes() instead.
    """

    @abstractmethod
    def redact(self, context: RedactionContext) -> RedactionContext:
        """Return a redacted copy of context (or context itself if unchanged)."""
        ...


class IdentityRedactor(Redactor):
    """Redactor that passes every context through unchanged."""

    def redact(self, context: RedactionContext) -> RedactionContext:
        return context


class PatternRedactor(Redactor):
    """Replace secret-looking values in headers and bodies.

    Built-in patterns are always included. Custom patterns extend (never
    replace) the built-in set and are compiled at construction time.

    Header values are replaced entirely when the header name looks like
    a secret, or when redact_all_headers is set; other header values get
    the pattern substitution. String bodies get the pattern substitution.
    JSON bodies are walked recursively: values under secret-looking keys
    are replaced and every other string is pattern-substituted.
    """

    def __init__(
        self,
        custom_patterns: list[str] | None = None,
        redact_all_headers: bool = False,
    ) -> None:
        self.patterns: list[re.Pattern[str]] = list(_COMPILED_PATTERNS)
        for pattern_str in custom_patterns or []:
            try:
                compiled = re.compile(pattern_str)
            except re.error as exc:
                raise ValueError(
                    f"Invalid custom redaction pattern {pattern_str!r}: {exc}"
                ) from exc
            self.patterns.append(compiled)
        self.redact_all_headers = redact_all_headers

    def redact_text(self, content: str) -> str:
        for pattern in self.patterns:
            content = pattern.sub(REDACTED_PLACEHOLDER, content)
        return content

    def _redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redact_text(value)
        if isinstance(value, dict):
            return {
                key: REDACTED_PLACEHOLDER
                if isinstance(key, str) and _SECRET_KEY_PATTERN.search(key)
                else self._redact_value(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._redact_value(item) for item in value]
        return value

    def _redact_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        redacted: dict[str, str] = {}
        for name, value in headers.items():
            if self.redact_all_headers or _SECRET_KEY_PATTERN.search(name):
                redacted[name] = REDACTED_PLACEHOLDER
            else:
                redacted[name] = self.redact_text(value)
        return redacted

    def redact(self, context: RedactionContext) -> RedactionContext:
        return context.with_changes(
            headers=self._redact_headers(context.headers),
            body=self._redact_value(context.body),
        )


class HeaderMaskRedactor(Redactor):
    """Replace the values of named headers with a mask.

    Header names are matched case-insensitively. The header itself is
    kept so a replayed fixture still shows that it was sent.
    """

    def __init__(
        self,
        header_names: Iterable[str],
        mask: str = REDACTED_PLACEHOLDER,
    ) -> None:
        self.header_names = frozenset(name.lower() for name in header_names)
        self.mask = mask

    def redact(self, context: RedactionContext) -> RedactionContext:
        return context.with_changes(
            headers={
                name: self.mask if name.lower() in self.header_names else value
                for name, value in context.headers.items()
            }
        )


class JsonPathRedactor(Redactor):
    """Mask values at dot-separated paths in JSON bodies.

    "user.password" masks body["user"]["password"]; a numeric segment
    indexes into a list ("items.0.token"). Paths that do not exist in a
    given body are skipped, and bodies that are not dicts or lists pass
    through unchanged.
    """

    def __init__(
        self,
        paths: Iterable[str],
        mask: str = REDACTED_PLACEHOLDER,
    ) -> None:
        self.paths: list[tuple[str, ...]] = []
        for path in paths:
            parts = tuple(path.split("."))
            if not all(parts):
                raise ValueError(f"Invalid JSON path {path!r}")
            self.paths.append(parts)
        self.mask = mask

    def redact(self, context: RedactionContext) -> RedactionContext:
        if not isinstance(context.body, (dict, list)):
            return context
        body = copy.deepcopy(context.body)
        for parts in self.paths:
            _mask_path(body, parts, self.mask)
        return context.with_changes(body=body)


def _child(container: Any, part: str) -> tuple[bool, Any]:
    """Look up one path segment; returns (found, value)."""
    if isinstance(container, dict):
        if part in container:
            return True, container[part]
    elif isinstance(container, list) and part.isdigit():
        index = int(part)
        if index < len(container):
            return True, container[index]
    return False, None


def _mask_path(body: Any, parts: tuple[str, ...], mask: str) -> None:
    current = body
    for part in parts[:-1]:
        found, current = _child(current, part)
        if not found:
            return
    last = parts[-1]
    found, _ = _child(current, last)
    if not found:
        return
    if isinstance(current, dict):
        current[last] = mask
    else:
        current[int(last)] = mask


class ConditionalRedactor(Redactor):
    """Apply a redactor only to contexts that satisfy a condition."""

    def __init__(
        self,
        condition: Callable[[RedactionContext], bool],
        redactor: Redactor,
    ) -> None:
        self.condition = condition
        self.redactor = redactor

    def redact(self, context: RedactionContext) -> RedactionContext:
        if self.condition(context):
            return self.redactor.redact(context)
        return context


def request_only(redactor: Redactor) -> ConditionalRedactor:
    """Restrict a redactor to the request side of each call."""
    return ConditionalRedactor(lambda context: context.type == "request", redactor)


def response_only(redactor: Redactor) -> ConditionalRedactor:
    """Restrict a redactor to the response side of each call."""
    return ConditionalRedactor(lambda context: context.type == "response", redactor)


class ComposedRedactor(Redactor):
    """Run several redactors in order, each on the previous one's output."""

    def __init__(self, *redactors: Redactor) -> None:
        self.redactors: tuple[Redactor, ...] = redactors

    def redact(self, context: RedactionContext) -> RedactionContext:
        for redactor in self.redactors:
            context = redactor.redact(context)
        return context


def strip_excluded_headers(
    headers: Mapping[str, str],
    excluded: Iterable[str],
) -> dict[str, str]:
    """Return a copy of headers without the excluded names.

    Matching is case-insensitive. An empty excluded list returns an
    unfiltered copy.
    """
    excluded_lower = {name.lower() for name in excluded}
    return {
        name: value
        for name, value in headers.items()
        if name.lower() not in excluded_lower
    }


def apply_redaction(
    context: RedactionContext,
    redactor: Redactor | None,
    excluded_headers: Iterable[str] = (),
) -> RedactionContext:
    """Run the full pipeline for one side of a call.

    Excluded headers are stripped first, then the redactor (if any) runs
    on what is left. The redactor's output is stripped again, so an
    excluded header can never come back from the redactor.
    """
    excluded = tuple(excluded_headers)
    stripped = context.with_changes(
        headers=strip_excluded_headers(context.headers, excluded)
    )
    if redactor is None:
        return stripped
    redacted = redactor.redact(stripped)
    return redacted.with_changes(
        headers=strip_excluded_headers(redacted.headers, excluded)
    )


def build_redactor(config: RecordingConfig) -> Redactor | None:
    """Build the redactor described by a RecordingConfig.

    Returns None when redaction is disabled, which leaves headers and
    bodies untouched apart from excluded-header stripping.

    masked_headers and masked_json_paths add a HeaderMaskRedactor and a
    JsonPathRedactor that run after the pattern redactor.

    Raises:
        ValueError: If a custom pattern or JSON path is invalid.
    """
    if not config.redaction:
        return None
    pattern_redactor = PatternRedactor(
        custom_patterns=config.custom_redaction_patterns,
        redact_all_headers=config.redact_all_headers,
    )
    extra: list[Redactor] = []
    if config.masked_headers:
        extra.append(HeaderMaskRedactor(config.masked_headers))
    if config.masked_json_paths:
        extra.append(JsonPathRedactor(config.masked_json_paths))
    if not extra:
        return pattern_redactor
    return ComposedRedactor(pattern_redactor, *extra)
