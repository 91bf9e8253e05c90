# Serialized form of response stages and the checks applied when reading it.

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, TypeAlias, TypeVar, Union

from pydantic import TypeAdapter

from intact_http.exceptions import StageLoadError

if TYPE_CHECKING:
    from intact_http.stages.response_stage import ResponseStage

SerializablePrimitive = Union[str, float, int, bool]

SerializableDict: TypeAlias = dict[str, Union[SerializablePrimitive, List[Any], dict[str, Any], None]]

SerializableDictAdapter = TypeAdapter(SerializableDict)

StageT = TypeVar("StageT", bound="ResponseStage")


def dump_stage_config(stage: "ResponseStage") -> SerializableDict:
    """Dumps a stage's fields for a pipeline file.

    Fields left at None are omitted, so loading falls back to their defaults.
    Fields listed in the stage's `nullable_config` are kept even when None,
    because for them None is a setting of its own.
    """
    data = stage.model_dump(mode="python", by_alias=True)
    config = {key: value for key, value in data.items() if value is not None or key in stage.nullable_config}
    return SerializableDictAdapter.validate_python(config)


def validate_stage_config(stage_class: type[StageT], config: SerializableDict) -> StageT:
    """Builds a stage from its config after checking the config only holds serializable values."""
    validated = SerializableDictAdapter.validate_python(config)
    return stage_class.model_validate(validated, from_attributes=True)


@dataclass
class SerializedStage:
    """Represents the serialized form of a ResponseStage.

    Attributes:
        type (str): The registered name of the stage type (e.g., "BodyLoggingStage").
        config (SerializableDict): The parameters needed to reconstruct the stage.
    """

    type: str
    config: SerializableDict

    @classmethod
    def from_entry(cls, entry: Any, where: str, require_config: bool = False) -> "SerializedStage":
        """Reads a {"type": ..., "config": {...}} entry from a pipeline file.

        Args:
            entry: The raw entry.
            where: Describes the entry's position in error messages.
            require_config: Whether a missing 'config' is an error rather than an empty config.

        Raises:
            StageLoadError: If the entry is not a dictionary, or its type or config is malformed.
        """
        if not isinstance(entry, dict):
            raise StageLoadError(f"{where} is not a dictionary. Got {type(entry)}")

        stage_type = entry.get("type")
        if not isinstance(stage_type, str):
            raise StageLoadError(f"{where} is missing 'type' or it's not a string. Got {type(stage_type)}")

        config = entry.get("config") if require_config else entry.get("config", {})
        if not isinstance(config, dict):
            raise StageLoadError(f"{where} has a 'config' that is not a dictionary. Got {type(config)}")

        return cls(type=stage_type, config=config)
