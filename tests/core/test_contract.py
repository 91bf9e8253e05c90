
from intact_http.core.contract import (
    BodyState,
    ContractViolation,
    StageContract,
    StageLayer,
    check_stage_order,
    combined_contract,
    describe_contract,
    next_body_state,
)
from intact_http.stages import BodyLoggingStage, HeaderLoggingStage, JsonDeserializationStage, NoopStage


def test_default_contract_leaves_body_untouched():
    contract = StageContract()

    assert not contract.reads_body
    assert not contract.consumes_body
    assert contract.layer == StageLayer.APPLICATION


def test_reader_without_buffer_consumes():
    assert StageContract(reads_body=True).consumes_body
    assert not StageContract(reads_body=True, buffers_body=True).consumes_body


def test_buffering_logger_before_deserializer_is_valid():
    assert check_stage_order([BodyLoggingStage(), JsonDeserializationStage()]) == []


def test_non_body_stages_anywhere_are_valid():
    stages = [NoopStage(name="first"), HeaderLoggingStage(), JsonDeserializationStage(), NoopStage(name="last")]

    assert check_stage_order(stages) == []


def test_consuming_logger_as_last_reader_is_valid():
    stages = [JsonDeserializationStage(), BodyLoggingStage(buffer_body=False), HeaderLoggingStage()]

    assert check_stage_order(stages) == []


def test_consuming_logger_before_deserializer_is_violation():
    stages = [HeaderLoggingStage(), BodyLoggingStage(name="naive-logger", buffer_body=False), JsonDeserializationStage()]

    violations = check_stage_order(stages)

    assert violations == [
        ContractViolation(consumer="naive-logger", consumer_index=1, starved="JsonDeserializationStage", starved_index=2)
    ]
    assert "would receive an empty body" in str(violations[0])


def test_every_starved_reader_is_reported():
    stages = [
        BodyLoggingStage(name="naive-logger", buffer_body=False),
        BodyLoggingStage(name="second-logger"),
        JsonDeserializationStage(),
    ]

    starved = [v.starved for v in check_stage_order(stages)]

    assert starved == ["second-logger", "JsonDeserializationStage"]


def _describe(reads: bool, buffers: bool = False, deserializes: bool = False, mutates: bool = False) -> str:
    return describe_contract(
        StageContract(reads_body=reads, buffers_body=buffers, deserializes_body=deserializes, mutates_body=mutates)
    )


def test_describe_contract():
    assert _describe(False) == "body untouched"
    assert _describe(True) == "reads, consumes"
    assert _describe(True, buffers=True, deserializes=True) == "reads, buffers, deserializes"
    assert _describe(True, buffers=True, mutates=True) == "reads, buffers, mutates"


def test_consuming_last_stage_starves_the_final_reader():
    stages = [HeaderLoggingStage(), BodyLoggingStage(name="naive-logger", buffer_body=False)]

    violations = check_stage_order(stages, final_reader="caller")

    assert violations == [ContractViolation(consumer="naive-logger", consumer_index=1, starved="caller")]
    assert str(violations[0]).endswith("so the caller would receive an empty body")


def test_consuming_stage_after_buffering_reader_is_valid():
    stages = [
        JsonDeserializationStage(),
        BodyLoggingStage(name="naive-logger", buffer_body=False),
        JsonDeserializationStage(name="second-parse"),
    ]

    assert check_stage_order(stages, final_reader="caller") == []


def test_next_body_state():
    consuming = StageContract(reads_body=True)
    buffering = StageContract(reads_body=True, buffers_body=True)

    assert next_body_state(BodyState.STREAM, StageContract()) is BodyState.STREAM
    assert next_body_state(BodyState.STREAM, buffering) is BodyState.BUFFERED
    assert next_body_state(BodyState.STREAM, consuming) is BodyState.CONSUMED
    assert next_body_state(BodyState.BUFFERED, consuming) is BodyState.BUFFERED
    assert next_body_state(BodyState.CONSUMED, buffering) is BodyState.CONSUMED


def test_combined_contract():
    consuming = StageContract(reads_body=True)
    buffering = StageContract(reads_body=True, buffers_body=True, deserializes_body=True)

    assert combined_contract([]) == StageContract()
    assert combined_contract([StageContract(), consuming]).consumes_body
    assert combined_contract([buffering, consuming]) == StageContract(
        reads_body=True, buffers_body=True, deserializes_body=True
    )
    assert combined_contract([consuming, buffering]).consumes_body
