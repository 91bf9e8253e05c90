# Loads response stages and pipelines from serialized data.

import json
import logging
from typing import TYPE_CHECKING

from intact_http.exceptions import StageLoadError, StageOrderingError
from intact_http.stages.response_stage import ResponseStage
from intact_http.stages.serialization import SerializedStage

if TYPE_CHECKING:
    from intact_http.stages.pipeline import StagePipeline

logger = logging.getLogger(__name__)


def load_stage(serialized_stage: SerializedStage) -> ResponseStage:
    """
    Instantiates a ResponseStage from its serialized type and config.

    Raises:
        StageLoadError: If the type is unknown, data is malformed, or the
            stage's from_serialized fails.
    """
    # Import the stage registry here to avoid circular import
    from .registry import STAGE_NAME_TO_CLASS

    stage_type = serialized_stage.type
    stage_config = serialized_stage.config

    if not isinstance(stage_type, str):
        raise StageLoadError(f"Stage 'type' must be a string, got: {type(stage_type)}")
    if not isinstance(stage_config, dict):
        raise StageLoadError(f"Stage 'config' must be a dictionary, got: {type(stage_config)}")

    stage_class = STAGE_NAME_TO_CLASS.get(stage_type)
    if stage_class is None:
        raise StageLoadError(
            f"Unknown stage type: '{stage_type}'. Available stages: {list(STAGE_NAME_TO_CLASS.keys())}"
        )

    try:
        instance = stage_class.from_serialized(stage_config)
    except (StageLoadError, StageOrderingError):
        raise
    except Exception as e:
        logger.error(f"Error instantiating stage '{stage_type}': {e}", exc_info=True)
        raise StageLoadError(f"Error instantiating stage '{stage_type}': {e}", stage_name=stage_type) from e
    logger.info(f"Successfully loaded stage: {getattr(instance, 'name', stage_type)}")
    return instance


def load_pipeline_from_file(filepath: str) -> "StagePipeline":
    """Loads a StagePipeline from a JSON file of the form {"type": ..., "config": {...}}."""
    from .pipeline import StagePipeline

    with open(filepath, "r") as f:
        raw_data = json.load(f)

    serialized = SerializedStage.from_entry(raw_data, f"Pipeline data loaded from {filepath}", require_config=True)
    stage = load_stage(serialized)
    if not isinstance(stage, StagePipeline):
        raise StageLoadError(f"Pipeline file {filepath} must describe a StagePipeline, got '{serialized.type}'")
    return stage
