import logging

import pytest
from intact_http.stages import BodyLoggingStage

from tests.helpers.factories import ITEMS_BODY, make_transaction


@pytest.mark.asyncio
async def test_buffering_stage_leaves_body_for_next_reader(items_transaction, container, caplog):
    stage = BodyLoggingStage()

    with caplog.at_level(logging.INFO):
        result = await stage.apply(items_transaction, container)

    assert await result.response.body.read() == ITEMS_BODY
    assert '{"items":[1,2,3]}' in caplog.text
    assert "(17-byte body)" in caplog.text


@pytest.mark.asyncio
async def test_non_buffering_stage_drains_body(items_transaction, container):
    stage = BodyLoggingStage(buffer_body=False)

    result = await stage.apply(items_transaction, container)

    assert result.response.body.consumed
    assert await result.response.body.read() == b""


def test_contract_follows_buffer_flag():
    assert BodyLoggingStage().contract.buffers_body
    consuming = BodyLoggingStage(buffer_body=False).contract
    assert consuming.reads_body and consuming.consumes_body


@pytest.mark.asyncio
async def test_binary_body_is_not_logged(container, caplog):
    transaction = make_transaction(b"\x00\x01\x02", headers={"Content-Type": "application/octet-stream"})

    with caplog.at_level(logging.INFO):
        await BodyLoggingStage().apply(transaction, container)

    assert "binary 3-byte body omitted" in caplog.text


@pytest.mark.asyncio
async def test_empty_body_is_logged_as_empty(container, caplog):
    transaction = make_transaction(b"", status_code=204, headers={})

    with caplog.at_level(logging.INFO):
        await BodyLoggingStage().apply(transaction, container)

    assert "(0-byte body)" in caplog.text


def test_serialize_round_trip():
    stage = BodyLoggingStage(name="audit", buffer_body=False, max_body_log_bytes=128)

    data = stage.serialize()
    restored = BodyLoggingStage.from_serialized(data)

    assert data["type"] == "BodyLoggingStage"
    assert "logger" not in data
    assert isinstance(restored, BodyLoggingStage)
    assert restored.name == "audit"
    assert restored.buffer_body is False
    assert restored.max_body_log_bytes == 128
