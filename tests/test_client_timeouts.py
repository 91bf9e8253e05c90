"""Timeouts against a real socket on the loopback interface."""

import asyncio

import pytest
import pytest_asyncio
from intact_http.client import PipelineClient
from intact_http.client_config import ClientConfig
from intact_http.exceptions import RequestTimeoutError

SERVER_DELAY_SECONDS = 2.0

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def slow_server():
    """Accepts a request, then waits before answering with a small JSON body."""
    handlers = set()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        handlers.add(asyncio.current_task())
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 17\r\n\r\n")
            await writer.drain()
            await asyncio.sleep(SERVER_DELAY_SECONDS)
            writer.write(b'{"items":[1,2,3]}')
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    yield f"http://{host}:{port}/items"

    for task in handlers:
        task.cancel()
    server.close()
    await server.wait_closed()


@pytest.mark.asyncio
@pytest.mark.parametrize("level", ["BODY", "HEADERS"])
async def test_stalled_body_raises_read_timeout(slow_server, level):
    config = ClientConfig(read_timeout=0.2, body_log_level=level)

    async with PipelineClient(config=config) as client:
        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.get(slow_server)

    assert exc_info.value.timeout_kind == "read"
    assert exc_info.value.url == slow_server


@pytest.mark.asyncio
async def test_response_within_read_timeout_is_delivered(slow_server):
    config = ClientConfig(read_timeout=SERVER_DELAY_SECONDS * 3)

    async with PipelineClient(config=config) as client:
        transaction = await client.get(slow_server)

    assert transaction.parsed_body == {"items": [1, 2, 3]}
