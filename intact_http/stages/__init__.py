from intact_http.core.contract import BodyState, ContractViolation, StageContract, StageLayer, check_stage_order

from .body_logging_stage import BodyLoggingStage
from .header_logging_stage import HeaderLoggingStage
from .json_deserialization_stage import JsonDeserializationStage
from .loader import load_pipeline_from_file, load_stage
from .noop_stage import NoopStage
from .pipeline import StagePipeline
from .response_stage import ResponseStage

__all__ = [
    "BodyLoggingStage",
    "BodyState",
    "ContractViolation",
    "HeaderLoggingStage",
    "JsonDeserializationStage",
    "NoopStage",
    "ResponseStage",
    "StageContract",
    "StageLayer",
    "StagePipeline",
    "check_stage_order",
    "load_pipeline_from_file",
    "load_stage",
]
