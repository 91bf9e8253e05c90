# Stage registry mapping stage type names to classes.

from typing import Dict, Type

from .body_logging_stage import BodyLoggingStage
from .header_logging_stage import HeaderLoggingStage
from .json_deserialization_stage import JsonDeserializationStage
from .noop_stage import NoopStage
from .pipeline import StagePipeline
from .response_stage import ResponseStage

# Registry mapping stage names (as used in serialized pipelines) to their classes
STAGE_NAME_TO_CLASS: Dict[str, Type["ResponseStage"]] = {
    "BodyLoggingStage": BodyLoggingStage,
    "HeaderLoggingStage": HeaderLoggingStage,
    "JsonDeserializationStage": JsonDeserializationStage,
    "NoopStage": NoopStage,
    "StagePipeline": StagePipeline,
}

STAGE_CLASS_TO_NAME: Dict[Type["ResponseStage"], str] = {v: k for k, v in STAGE_NAME_TO_CLASS.items()}
