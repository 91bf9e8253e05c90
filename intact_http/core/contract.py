"""Read/mutate contracts declared by response stages, and the ordering rule over them."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from intact_http.stages.response_stage import ResponseStage


class StageLayer(str, Enum):
    """Where a stage observes the response."""

    TRANSPORT = "transport"
    APPLICATION = "application"


class StageContract(BaseModel):
    """What a stage does to the response body.

    Attributes:
        reads_body: The stage reads the body stream.
        buffers_body: The stage captures what it reads and replays it to later readers.
        mutates_body: The stage replaces the body content.
        deserializes_body: The stage parses the body into a structured value.
        layer: The layer the stage runs at.
    """

    model_config = ConfigDict(frozen=True)

    reads_body: bool = False
    buffers_body: bool = False
    mutates_body: bool = False
    deserializes_body: bool = False
    layer: StageLayer = StageLayer.APPLICATION

    @property
    def consumes_body(self) -> bool:
        """True when reading this stage's way leaves nothing for the next reader."""
        return self.reads_body and not self.buffers_body


class BodyState(str, Enum):
    """What a reader finds when it reaches the body."""

    STREAM = "stream"
    BUFFERED = "buffered"
    CONSUMED = "consumed"


def next_body_state(state: BodyState, contract: StageContract) -> BodyState:
    """The body's state after a stage with `contract` has run on a body in `state`.

    A buffered body replays to every reader, whatever their contract.
    """
    if state is not BodyState.STREAM or not contract.reads_body:
        return state
    return BodyState.BUFFERED if contract.buffers_body else BodyState.CONSUMED


@dataclass(frozen=True)
class ContractViolation:
    """A stage that drains an unbuffered body ahead of another reader.

    `starved_index` is None when the starved reader is the caller, which reads
    the body after the last stage.
    """

    consumer: str
    consumer_index: int
    starved: str
    starved_index: Optional[int] = None

    def __str__(self) -> str:
        if self.starved_index is None:
            target = f"the {self.starved}"
        else:
            target = f"stage {self.starved_index + 1} '{self.starved}'"
        return (
            f"stage {self.consumer_index + 1} '{self.consumer}' reads the response body without buffering it, "
            f"so {target} would receive an empty body"
        )


def check_stage_order(
    stages: Sequence["ResponseStage"],
    final_reader: Optional[str] = None,
) -> List[ContractViolation]:
    """Returns every reader that would be left an empty body by an earlier stage.

    Only a stage that reads a body nobody has buffered yet can consume it. If
    such a stage is followed by another body reader, every later reader is
    reported. When `final_reader` is given it names an implicit reader after
    the last stage, such as the caller.
    """
    violations = []
    state = BodyState.STREAM
    for i, stage in enumerate(stages):
        contract = stage.contract
        state_after = next_body_state(state, contract)
        if state is BodyState.STREAM and state_after is BodyState.CONSUMED:
            for j in range(i + 1, len(stages)):
                later = stages[j]
                if later.contract.reads_body:
                    violations.append(
                        ContractViolation(
                            consumer=stage.display_name,
                            consumer_index=i,
                            starved=later.display_name,
                            starved_index=j,
                        )
                    )
            if final_reader is not None:
                violations.append(ContractViolation(consumer=stage.display_name, consumer_index=i, starved=final_reader))
        state = state_after
    return violations


def combined_contract(contracts: Sequence[StageContract]) -> StageContract:
    """The contract of a sequence of stages run as one.

    The sequence buffers the body when it leaves a readable body behind, i.e.
    some member buffered it before any member could consume it.
    """
    state = BodyState.STREAM
    for contract in contracts:
        state = next_body_state(state, contract)
    return StageContract(
        reads_body=any(c.reads_body for c in contracts),
        buffers_body=state is BodyState.BUFFERED,
        mutates_body=any(c.mutates_body for c in contracts),
        deserializes_body=any(c.deserializes_body for c in contracts),
    )


def describe_contract(contract: StageContract) -> str:
    """Short human readable form of a contract, e.g. "reads, buffers"."""
    if not contract.reads_body:
        return "body untouched"
    parts = ["reads", "buffers" if contract.buffers_body else "consumes"]
    if contract.mutates_body:
        parts.append("mutates")
    if contract.deserializes_body:
        parts.append("deserializes")
    return ", ".join(parts)
