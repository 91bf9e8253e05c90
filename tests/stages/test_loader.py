import json
from unittest.mock import patch

import pytest
from intact_http.exceptions import StageLoadError, StageOrderingError
from intact_http.stages import (
    BodyLoggingStage,
    JsonDeserializationStage,
    NoopStage,
    StagePipeline,
    load_pipeline_from_file,
    load_stage,
)
from intact_http.stages.registry import STAGE_CLASS_TO_NAME, STAGE_NAME_TO_CLASS
from intact_http.stages.serialization import SerializedStage


def write_pipeline(tmp_path, data) -> str:
    path = tmp_path / "pipeline.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_registry_is_bidirectional():
    assert set(STAGE_NAME_TO_CLASS) == {
        "BodyLoggingStage",
        "HeaderLoggingStage",
        "JsonDeserializationStage",
        "NoopStage",
        "StagePipeline",
    }
    for name, cls in STAGE_NAME_TO_CLASS.items():
        assert STAGE_CLASS_TO_NAME[cls] == name
        assert cls.get_stage_type_name() == name


def test_load_stage_with_config():
    stage = load_stage(SerializedStage(type="BodyLoggingStage", config={"name": "audit", "buffer_body": True}))

    assert isinstance(stage, BodyLoggingStage)
    assert stage.name == "audit"
    assert stage.contract.buffers_body


def test_load_stage_unknown_type():
    with pytest.raises(StageLoadError, match="Unknown stage type: 'Nope'"):
        load_stage(SerializedStage(type="Nope", config={}))


def test_load_stage_non_dict_config():
    with pytest.raises(StageLoadError, match="'config' must be a dictionary"):
        load_stage(SerializedStage(type="NoopStage", config=["a"]))  # type: ignore[arg-type]


def test_load_stage_wraps_instantiation_errors():
    with patch.object(NoopStage, "from_serialized", side_effect=RuntimeError("boom")):
        with pytest.raises(StageLoadError, match="Error instantiating stage 'NoopStage': boom") as exc_info:
            load_stage(SerializedStage(type="NoopStage", config={}))

    assert exc_info.value.stage_name == "NoopStage"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_load_stage_wraps_validation_errors():
    with pytest.raises(StageLoadError, match="Error instantiating stage 'JsonDeserializationStage'"):
        load_stage(SerializedStage(type="JsonDeserializationStage", config={"on_empty": "explode"}))


def test_load_pipeline_from_file(tmp_path):
    filepath = write_pipeline(
        tmp_path,
        {
            "type": "StagePipeline",
            "config": {
                "name": "from-file",
                "stages": [
                    {"type": "BodyLoggingStage", "config": {}},
                    {"type": "JsonDeserializationStage", "config": {"on_empty": "raise"}},
                ],
            },
        },
    )

    pipeline = load_pipeline_from_file(filepath)

    assert isinstance(pipeline, StagePipeline)
    assert pipeline.name == "from-file"
    assert isinstance(pipeline.stages[1], JsonDeserializationStage)
    assert pipeline.stages[1].on_empty == "raise"


def test_load_pipeline_from_file_rejects_bad_order(tmp_path):
    filepath = write_pipeline(
        tmp_path,
        {
            "type": "StagePipeline",
            "config": {
                "stages": [
                    {"type": "BodyLoggingStage", "config": {"buffer_body": False}},
                    {"type": "JsonDeserializationStage", "config": {}},
                ]
            },
        },
    )

    with pytest.raises(StageOrderingError):
        load_pipeline_from_file(filepath)


@pytest.mark.parametrize(
    "data, message",
    [
        ([], "is not a dictionary"),
        ({"config": {"stages": []}}, "missing 'type'"),
        ({"type": "StagePipeline"}, "'config' that is not a dictionary"),
        ({"type": "NoopStage", "config": {}}, "must describe a StagePipeline"),
    ],
)
def test_load_pipeline_from_file_rejects_malformed_files(tmp_path, data, message):
    filepath = write_pipeline(tmp_path, data)

    with pytest.raises(StageLoadError, match=message):
        load_pipeline_from_file(filepath)


def test_load_pipeline_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_pipeline_from_file(str(tmp_path / "missing.json"))
