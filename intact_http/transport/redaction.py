"""Helpers for writing headers and bodies to logs without leaking secrets."""

from typing import Iterable, List, Optional, Tuple

import httpx

SENSITIVE_HEADER_KEYS: List[str] = [
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "api-key",
]
REDACTED_PLACEHOLDER: str = "[REDACTED]"

MAX_CONTENT_BYTES_LOG: int = 1024 * 10  # Log up to 10KB of content

TEXTUAL_CONTENT_TYPES = ("application/json", "application/xml", "application/x-www-form-urlencoded")


def sanitize_headers(headers: httpx.Headers, redact: Optional[Iterable[str]] = None) -> List[Tuple[str, str]]:
    """Returns header pairs in wire order with sensitive values replaced.

    Repeated headers are kept as separate pairs.
    """
    redact_lower = {key.lower() for key in (SENSITIVE_HEADER_KEYS if redact is None else redact)}
    sanitized = []
    for key, value in headers.multi_items():
        if key.lower() in redact_lower:
            sanitized.append((key, REDACTED_PLACEHOLDER))
        else:
            sanitized.append((key, value))
    return sanitized


def is_probably_text(content: bytes, content_type: Optional[str] = None) -> bool:
    """Guesses whether a body is human readable.

    Inspects the content type when present and otherwise the first 64
    characters of the body, rejecting control characters other than
    whitespace.
    """
    if content_type:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type.startswith("text/") or media_type.endswith("+json") or media_type in TEXTUAL_CONTENT_TYPES:
            return True
    try:
        prefix = content[:256].decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut at the slice boundary is still text
        if len(content) <= 256 or e.start < 252:
            return False
        prefix = content[: e.start].decode("utf-8")
    for char in prefix[:64]:
        if not char.isprintable() and not char.isspace():
            return False
    return True


def truncate_for_log(text: str, max_bytes: int = MAX_CONTENT_BYTES_LOG) -> str:
    """Shortens text written to a log record. The response body itself is never truncated."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    shown = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return f"{shown}... [{len(encoded) - max_bytes} more bytes]"
