# Pipeline that applies an explicitly declared, ordered list of response stages.

import logging
import time
from typing import Iterable, List, Optional, cast

from pydantic import Field

from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.logging import log_stage_execution
from intact_http.core.transaction import Transaction
from intact_http.exceptions import StageLoadError, StageOrderingError
from intact_http.core.contract import StageContract, check_stage_order, combined_contract
from intact_http.stages.loader import load_stage
from intact_http.stages.response_stage import ResponseStage
from intact_http.stages.serialization import SerializableDict, SerializedStage

logger = logging.getLogger(__name__)


class StagePipeline(ResponseStage):
    """
    Applies an ordered sequence of stages to a response.

    The order is declared up front rather than implied by registration calls.
    On construction the stages' body contracts are checked: a stage that reads
    a body no earlier stage has buffered, without buffering it itself, may not
    be followed by another body reader. Whether the caller, who reads the body
    last, is starved is checked by `PipelineClient`.
    With `enforce_contract` such an ordering raises `StageOrderingError`;
    without it each violation is logged and the pipeline runs anyway.

    Stages are applied sequentially. If any stage raises an exception,
    execution stops and the exception propagates.

    Attributes:
        stages (List[ResponseStage]): The stages, in the order they run.
        enforce_contract (bool): Reject orderings that would lose the body.
    """

    name: Optional[str] = Field(default="StagePipeline")
    stages: List[ResponseStage] = Field(default_factory=list)
    enforce_contract: bool = Field(default=True)
    logger: logging.Logger = Field(default_factory=lambda: logger, exclude=True)

    def model_post_init(self, __context) -> None:
        if not self.stages:
            self.logger.warning(f"Initializing StagePipeline '{self.name}' with an empty stage list.")
        violations = check_stage_order(self.stages)
        if not violations:
            return
        if self.enforce_contract:
            details = "; ".join(str(v) for v in violations)
            raise StageOrderingError(f"StagePipeline '{self.name}' would lose the response body: {details}", violations)
        for violation in violations:
            self.logger.warning(f"StagePipeline '{self.name}' contract not enforced: {violation}")

    @property
    def contract(self) -> StageContract:
        return combined_contract([stage.contract for stage in self.stages])

    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        """
        Applies the contained stages sequentially to the transaction.

        Raises:
            Exception: Propagates any exception raised by a contained stage.
        """
        tx_id = str(transaction.transaction_id)
        self.logger.debug(f"[{tx_id}] Entering StagePipeline: {self.name}")
        current = transaction
        for i, stage in enumerate(self.stages):
            stage_name = stage.display_name
            self.logger.info(f"[{tx_id}] Applying stage {i + 1}/{len(self.stages)} in {self.name}: {stage_name}")
            start = time.perf_counter()
            try:
                current = await stage.apply(current, container)
            except Exception as e:
                log_stage_execution(tx_id, stage_name, "error", duration=time.perf_counter() - start, error=str(e))
                self.logger.error(
                    f"[{tx_id}] Error applying stage {stage_name} within {self.name}: {e}",
                    exc_info=True,
                )
                raise
            current.mark_observed(stage_name)
            log_stage_execution(tx_id, stage_name, "completed", duration=time.perf_counter() - start)
        self.logger.debug(f"[{tx_id}] Exiting StagePipeline: {self.name}")
        return current

    def __repr__(self) -> str:
        stage_reprs = [f"{s.display_name} <{s.__class__.__name__}>" for s in self.stages]
        return f"<{self.name}(stages=[{', '.join(stage_reprs)}])>"

    def serialize(self) -> SerializableDict:
        """Serializes the pipeline and its member stages.

        Each member is written as a {"type": ..., "config": ...} dictionary.

        Raises:
            StageLoadError: If a member stage's type is not registered.
        """
        from .registry import STAGE_CLASS_TO_NAME

        member_configs = []
        for stage in self.stages:
            try:
                stage_type = STAGE_CLASS_TO_NAME[type(stage)]
            except KeyError:
                raise StageLoadError(
                    f"Could not determine stage type for {type(stage)} during serialization in {self.name} "
                    "(Not in STAGE_CLASS_TO_NAME)"
                )
            member_configs.append({"type": stage_type, "config": stage.serialize()})
        return cast(
            SerializableDict,
            {
                "type": self.type,
                "name": self.name,
                "enforce_contract": self.enforce_contract,
                "stages": member_configs,
            },
        )

    @classmethod
    def from_serialized(cls, config: SerializableDict) -> "StagePipeline":
        """
        Constructs a StagePipeline from serialized data, loading member stages.

        Args:
            config: Expects a 'stages' key containing a list of dictionaries,
                each with 'type' and 'config'.

        Raises:
            StageLoadError: If 'stages' is missing or malformed, or a member fails to load.
            StageOrderingError: If the declared order would lose the response body.
        """
        member_data_list = config.get("stages")

        if member_data_list is None:
            raise StageLoadError("StagePipeline config missing 'stages' list (key not found).")
        if not isinstance(member_data_list, Iterable) or isinstance(member_data_list, (str, bytes, dict)):
            raise StageLoadError(f"StagePipeline 'stages' must be a list. Got {type(member_data_list)}")

        stages = []
        for i, member_data in enumerate(member_data_list):
            serialized = SerializedStage.from_entry(member_data, f"Member stage at index {i} in StagePipeline 'stages'")
            try:
                stages.append(load_stage(serialized))
            except StageLoadError as e:
                raise StageLoadError(f"Failed to load member stage at index {i} within StagePipeline: {e}") from e

        name_val = config.get("name")
        name = str(name_val) if name_val is not None else "StagePipeline"
        enforce_contract = config.get("enforce_contract", True)
        if not isinstance(enforce_contract, bool):
            raise StageLoadError(f"StagePipeline 'enforce_contract' must be a boolean. Got {type(enforce_contract)}")

        return cls(stages=stages, name=name, enforce_contract=enforce_contract)
