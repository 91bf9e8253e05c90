# Interface for the response processing stages.

import abc
import logging
from typing import Any, ClassVar, FrozenSet, Optional, Type, TypeVar, cast

from pydantic import BaseModel, ConfigDict, Field

from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.response import PipelineResponse
from intact_http.core.transaction import Transaction
from intact_http.exceptions import NoResponseError
from intact_http.core.contract import StageContract
from intact_http.stages.serialization import SerializableDict, dump_stage_config, validate_stage_config

StageT = TypeVar("StageT", bound="ResponseStage")


class ResponseStage(BaseModel, abc.ABC):
    """Abstract Base Class for one step of response handling.

    Every stage declares a `StageContract` describing how it treats the
    response body. The pipeline checks those contracts before it runs.

    Attributes:
        name (Optional[str]): An optional name for the stage instance, used
            for logging and in contract violation messages.
    """

    name: Optional[str] = Field(default=None)
    type: str = Field(default="")
    logger: logging.Logger = Field(default_factory=lambda: logging.getLogger(__name__), exclude=True)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Fields serialized even when None
    nullable_config: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, **data: Any) -> None:
        if "type" not in data:
            data["type"] = self.get_stage_type_name()
        super().__init__(**data)

    @classmethod
    def get_stage_type_name(cls) -> str:
        """Get the canonical stage type name used in serialized pipelines."""
        # Import here to avoid circular imports
        from intact_http.stages.registry import STAGE_CLASS_TO_NAME

        stage_type = STAGE_CLASS_TO_NAME.get(cls)
        if stage_type is None:
            raise ValueError(f"{cls.__name__} is not registered in STAGE_CLASS_TO_NAME registry")
        return stage_type

    @property
    def display_name(self) -> str:
        return self.name or self.__class__.__name__

    @property
    def contract(self) -> StageContract:
        """The stage's body contract. Stages that never touch the body keep the default."""
        return StageContract()

    @staticmethod
    def require_response(transaction: Transaction) -> PipelineResponse:
        if transaction.response is None:
            raise NoResponseError(f"[{transaction.transaction_id}] Transaction has no response to process")
        return transaction.response

    @abc.abstractmethod
    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        """
        Apply the stage to the transaction.

        Args:
            transaction: The current transaction, holding the response.
            container: The dependency container.

        Returns:
            The transaction, possibly with `parsed_body` or `data` updated.

        Raises:
            Exception: Stages may raise to halt the pipeline.
        """
        raise NotImplementedError

    def serialize(self) -> SerializableDict:
        """Serialize using Pydantic model_dump through SerializableDict validation."""
        return dump_stage_config(self)

    @classmethod
    def from_serialized(cls: Type[StageT], config: SerializableDict) -> StageT:
        """
        Construct a stage from its serialized configuration.

        Looks up the concrete class from the 'type' key in config, inferring it
        from `cls` when called on a concrete stage class.

        Raises:
            ValueError: If the type is missing or not registered.
        """
        from intact_http.stages.registry import STAGE_NAME_TO_CLASS

        config_copy = dict(config)
        stage_type_name = config_copy.get("type")

        if not stage_type_name and cls is not ResponseStage:
            stage_type_name = cls.get_stage_type_name()
            config_copy["type"] = stage_type_name

        if not stage_type_name:
            raise ValueError("Stage configuration must include a 'type' field")
        if not isinstance(stage_type_name, str):
            raise ValueError(f"Stage 'type' must be a string, got {type(stage_type_name).__name__}")

        target_class = STAGE_NAME_TO_CLASS.get(stage_type_name)
        if not target_class:
            raise ValueError(f"Unknown stage type '{stage_type_name}'. Ensure it is registered in STAGE_NAME_TO_CLASS.")
        if target_class is not cls:
            return cast(StageT, target_class.from_serialized(config_copy))

        return cast(StageT, validate_stage_config(target_class, config_copy))
