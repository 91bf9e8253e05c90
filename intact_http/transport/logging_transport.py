"""Transport-level HTTP logging that buffers the response body it logs."""

import logging
import time
from typing import Iterable, Optional

import httpx

from intact_http.core.contract import StageContract, StageLayer
from intact_http.transport.log_level import BodyLogLevel
from intact_http.transport.redaction import (
    MAX_CONTENT_BYTES_LOG,
    is_probably_text,
    sanitize_headers,
    truncate_for_log,
)

logger = logging.getLogger(__name__)

# Extension key carrying the number of body bytes the transport received and logged.
LOGGED_BODY_BYTES_EXTENSION = "intact_http.logged_body_bytes"

STREAMING_CONTENT_TYPES = ("text/event-stream",)


def logging_contract(level: BodyLogLevel) -> StageContract:
    """Body contract of the transport logger at `level`, for display alongside pipeline stages."""
    logs_body = BodyLogLevel.parse(level).logs_body
    return StageContract(reads_body=logs_body, buffers_body=logs_body, layer=StageLayer.TRANSPORT)


class HttpLoggingTransport(httpx.AsyncBaseTransport):
    """Wraps another transport and logs each exchange beneath the client.

    At `BodyLogLevel.BODY` the response body is read from the wire once,
    logged, and handed upward as a replayable in-memory stream. Every reader
    above the transport, the caller included, still sees the complete body.

    Attributes:
        level (BodyLogLevel): How much of each exchange is logged.
        redact_headers (Optional[Iterable[str]]): Header names whose values are
            replaced in log output. Defaults to common credential headers.
        max_body_log_bytes (int): Upper bound on body text written per log record.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        level: BodyLogLevel = BodyLogLevel.BODY,
        redact_headers: Optional[Iterable[str]] = None,
        max_body_log_bytes: int = MAX_CONTENT_BYTES_LOG,
        logger: logging.Logger = logger,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self.level = BodyLogLevel.parse(level)
        self.redact_headers = None if redact_headers is None else list(redact_headers)
        self.max_body_log_bytes = max_body_log_bytes
        self.logger = logger

    @property
    def contract(self) -> StageContract:
        return logging_contract(self.level)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        level = self.level
        if level is BodyLogLevel.NONE:
            return await self._transport.handle_async_request(request)

        self._log_request(request)

        start = time.perf_counter()
        try:
            response = await self._transport.handle_async_request(request)
        except Exception as e:
            self.logger.info(f"<-- HTTP FAILED: {e!r}")
            raise
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        reason = response.reason_phrase
        self.logger.info(f"<-- {response.status_code}{' ' + reason if reason else ''} {request.url} ({elapsed_ms}ms)")

        if level.logs_headers:
            self._log_headers(response.headers)

        if not level.logs_body:
            self.logger.info("<-- END HTTP")
            return response

        content_type = response.headers.get("content-type", "")
        if content_type.split(";", 1)[0].strip().lower() in STREAMING_CONTENT_TYPES:
            self.logger.info("<-- END HTTP (streaming body omitted)")
            return response

        try:
            raw = await self._read_raw(response)
        except Exception as e:
            self.logger.info(f"<-- HTTP FAILED: {e!r}")
            raise

        self._log_response_body(response, raw)

        extensions = dict(response.extensions)
        extensions[LOGGED_BODY_BYTES_EXTENSION] = len(raw)
        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=httpx.ByteStream(raw),
            request=request,
            extensions=extensions,
        )

    async def _read_raw(self, response: httpx.Response) -> bytes:
        """Drains the wire stream once, still content-encoded."""
        parts = []
        try:
            async for chunk in response.stream:
                parts.append(chunk)
        finally:
            await response.aclose()
        return b"".join(parts)

    def _log_request(self, request: httpx.Request) -> None:
        level = self.level
        self.logger.info(f"--> {request.method} {request.url}")

        if level.logs_headers:
            self._log_headers(request.headers)

        if not level.logs_body:
            self.logger.info(f"--> END {request.method}")
            return

        try:
            content = request.content
        except httpx.RequestNotRead:
            self.logger.info(f"--> END {request.method} (streaming body omitted)")
            return

        if not content:
            self.logger.info(f"--> END {request.method}")
        elif is_probably_text(content, request.headers.get("content-type")):
            self.logger.info(truncate_for_log(content.decode("utf-8", errors="replace"), self.max_body_log_bytes))
            self.logger.info(f"--> END {request.method} ({len(content)}-byte body)")
        else:
            self.logger.info(f"--> END {request.method} (binary {len(content)}-byte body omitted)")

    def _log_headers(self, headers: httpx.Headers) -> None:
        for key, value in sanitize_headers(headers, self.redact_headers):
            self.logger.info(f"{key}: {value}")

    def _log_response_body(self, response: httpx.Response, raw: bytes) -> None:
        try:
            # Decode a throwaway copy so content-encoding is honoured for the log only
            preview = httpx.Response(response.status_code, headers=response.headers, content=raw)
            decoded = preview.content
        except httpx.DecodingError:
            self.logger.info(f"<-- END HTTP (encoded {len(raw)}-byte body omitted)")
            return
        except Exception as e:
            # Logging failure should not break the exchange.
            self.logger.error(f"Failed to log response body: {e}", exc_info=True)
            return

        if not decoded:
            self.logger.info("<-- END HTTP (0-byte body)")
            return
        if not is_probably_text(decoded, response.headers.get("content-type")):
            self.logger.info(f"<-- END HTTP (binary {len(decoded)}-byte body omitted)")
            return

        self.logger.info(truncate_for_log(preview.text, self.max_body_log_bytes))
        if len(raw) != len(decoded):
            self.logger.info(f"<-- END HTTP ({len(decoded)}-byte, {len(raw)}-encoded-byte body)")
        else:
            self.logger.info(f"<-- END HTTP ({len(decoded)}-byte body)")

    async def aclose(self) -> None:
        await self._transport.aclose()
