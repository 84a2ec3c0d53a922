"""
Masking of credentials in DSNs and in statement values headed for log records.

Statement values are judged by their predicate: only the local name of the
predicate IRI is inspected, so an ``ex:apiToken`` value is hidden while a
namespace that merely contains "secret" in its host does not hide
everything beneath it.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Tuple

REDACTED_VALUE = "***"

_SENSITIVE_NAMES = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "accesskey",
    "privatekey",
    "credential",
    "authorization",
)
_VALUE_MARKERS = ("bearer ", "basic ", "token=", "password=", "secret=")

_LOCAL_NAME_RE = re.compile(r"[^/#:]*$")


def local_name(iri: str) -> str:
    """
    Trailing segment of an IRI after the last ``/``, ``#`` or ``:``.
    """
    match = _LOCAL_NAME_RE.search(iri.rstrip("/#"))
    return match.group() if match else iri


def _squash(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum())


def is_sensitive_key(key: str) -> bool:
    squashed = _squash(local_name(key))
    return any(name in squashed for name in _SENSITIVE_NAMES)


def is_sensitive_value(value: str) -> bool:
    lowered = value.lower()
    return any(marker in lowered for marker in _VALUE_MARKERS)


def redact_query_params(query: dict[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else val for key, val in query.items()}


def redact_value(value: Any, *, key: str | None = None) -> Any:
    """
    Mask ``value`` when its key (usually a predicate IRI) or its content
    looks like a credential. Containers are walked recursively.
    """
    if key is not None and is_sensitive_key(str(key)):
        return REDACTED_VALUE
    if isinstance(value, dict):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(redact_value(item) for item in value)
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_statements(rows: Iterable[Tuple[str, str, Any]]) -> List[Tuple[str, str, Any]]:
    """
    ``(subject, predicate, value)`` rows with values masked per predicate.
    """
    return [(subject, predicate, redact_value(value, key=predicate)) for subject, predicate, value in rows]
