from enum import Enum
from typing import Any, List, Optional
from uuid import UUID, uuid4

import httpx
from psygnal.containers import EventedDict
from pydantic import BaseModel, ConfigDict, Field

from intact_http.core.response import PipelineResponse


class ResponseState(str, Enum):
    """Lifecycle of a single response through the pipeline."""

    RECEIVED = "received"
    OBSERVED = "observed"
    DELIVERED = "delivered"


class Transaction(BaseModel):
    """One request/response unit of work.

    Attributes:
        transaction_id: Identifier used to correlate log lines.
        request: The request that was sent.
        response: The response being processed, once received.
        parsed_body: Structured value produced by a deserialization stage.
        state: Where the response is in its lifecycle.
        stages_applied: Names of the stages that have observed the response, in order.
        data: Free-form values stages share with each other.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    transaction_id: UUID = Field(default_factory=uuid4)
    request: Optional[httpx.Request] = Field(default=None)
    response: Optional[PipelineResponse] = Field(default=None)
    parsed_body: Any = Field(default=None)
    state: ResponseState = Field(default=ResponseState.RECEIVED)
    stages_applied: List[str] = Field(default_factory=list)
    data: EventedDict = Field(default_factory=EventedDict)

    def mark_observed(self, stage_name: str) -> None:
        self.stages_applied.append(stage_name)
        self.state = ResponseState.OBSERVED

    def mark_delivered(self) -> None:
        self.state = ResponseState.DELIVERED
