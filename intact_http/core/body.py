"""Single-consumption response body with explicit buffering."""

import logging
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

ChunkSource = Union[bytes, AsyncIterable[bytes]]


async def _single_chunk(data: bytes) -> AsyncIterator[bytes]:
    if data:
        yield data


class ResponseBody:
    """A response body delivered by the transport as a one-shot byte stream.

    The underlying stream can be read to completion exactly once. A reader that
    only needs the bytes for a side effect (logging, metrics) must call
    `buffer()` or `tee()` first, which captures the content and makes every
    later `read()` return the same bytes. Reading an unbuffered body a second
    time yields `b""`, which is how a read-and-discard stage starves the stages
    ordered after it.

    Attributes:
        consumed (bool): True once the underlying stream has been drained.
        buffered (bool): True when the content is held in memory and replayable.
        bytes_read (int): Number of bytes pulled from the underlying stream.
    """

    def __init__(
        self,
        source: ChunkSource,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        if isinstance(source, (bytes, bytearray)):
            self._chunks: AsyncIterator[bytes] = _single_chunk(bytes(source))
        else:
            self._chunks = source.__aiter__()
        self._on_close = on_close
        self._content: Optional[bytes] = None
        self.consumed = False
        self.buffered = False
        self.bytes_read = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ResponseBody":
        """Creates a body whose content is already buffered."""
        body = cls(b"")
        body._content = bytes(data)
        body.bytes_read = len(data)
        body.consumed = True
        body.buffered = True
        return body

    async def _drain(self) -> bytes:
        parts = []
        try:
            async for chunk in self._chunks:
                self.bytes_read += len(chunk)
                parts.append(chunk)
        finally:
            self.consumed = True
            await self.aclose()
        return b"".join(parts)

    async def read(self) -> bytes:
        """Reads the body.

        Returns the full content if the body is buffered. Otherwise drains the
        stream, and a second call returns an empty byte string.
        """
        if self.buffered:
            return self._content or b""
        if self.consumed:
            logger.debug("Response body was already consumed by an earlier reader; returning empty body")
            return b""
        return await self._drain()

    async def buffer(self) -> "ResponseBody":
        """Captures the content so that it can be replayed to every later reader.

        Buffering a body that an unbuffered reader already drained captures
        nothing: the bytes are gone.
        """
        if not self.buffered:
            if self.consumed:
                logger.warning("Buffering a response body that was already consumed; content is lost")
                self._content = b""
            else:
                self._content = await self._drain()
            self.buffered = True
        return self

    async def tee(self) -> bytes:
        """Buffers the body and returns a copy of its content."""
        await self.buffer()
        return self._content or b""

    async def aclose(self) -> None:
        """Releases the underlying transport stream."""
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            await on_close()

    def __repr__(self) -> str:
        return f"<ResponseBody consumed={self.consumed} buffered={self.buffered} bytes_read={self.bytes_read}>"
