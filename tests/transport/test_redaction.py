import httpx
from intact_http.transport.redaction import (
    REDACTED_PLACEHOLDER,
    is_probably_text,
    sanitize_headers,
    truncate_for_log,
)


def test_sanitize_headers_keeps_order_and_duplicates():
    headers = httpx.Headers([("Accept", "a"), ("Cookie", "c=1"), ("Accept", "b")])

    assert sanitize_headers(headers) == [("accept", "a"), ("cookie", REDACTED_PLACEHOLDER), ("accept", "b")]


def test_sanitize_headers_with_empty_redaction_list():
    headers = httpx.Headers({"Authorization": "Bearer t"})

    assert sanitize_headers(headers, redact=[]) == [("authorization", "Bearer t")]


def test_is_probably_text():
    assert is_probably_text(b'{"a": 1}')
    assert is_probably_text(b"", "application/json")
    assert is_probably_text(b"\x00\x01", "text/plain")
    assert is_probably_text(b"{}", "application/problem+json; charset=utf-8")
    assert not is_probably_text(b"\x00\x01\x02")
    assert not is_probably_text(b"\xff\xfe\xfd")
    assert is_probably_text("ünïcödé line\n".encode("utf-8"))


def test_truncate_for_log():
    assert truncate_for_log("short", 100) == "short"
    assert truncate_for_log("abcdefghij", 4) == "abcd... [6 more bytes]"


def test_is_probably_text_invalid_byte_near_end_of_short_body():
    body = b"a" * 252 + b"\xff\xfe"

    assert not is_probably_text(body)


def test_is_probably_text_multibyte_character_cut_at_sample_boundary():
    body = b"a" * 255 + "é".encode("utf-8") + b"b" * 10

    assert is_probably_text(body)
