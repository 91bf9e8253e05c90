from intact_http.client import PipelineClient
from intact_http.client_config import ClientConfig, setup_http_client
from intact_http.core.body import ResponseBody
from intact_http.core.response import PipelineResponse
from intact_http.core.transaction import ResponseState, Transaction
from intact_http.stages import (
    BodyLoggingStage,
    HeaderLoggingStage,
    JsonDeserializationStage,
    NoopStage,
    ResponseStage,
    StagePipeline,
)
from intact_http.transport import BodyLogLevel, HttpLoggingTransport

__all__ = [
    "BodyLogLevel",
    "BodyLoggingStage",
    "ClientConfig",
    "HeaderLoggingStage",
    "HttpLoggingTransport",
    "JsonDeserializationStage",
    "NoopStage",
    "PipelineClient",
    "PipelineResponse",
    "ResponseBody",
    "ResponseStage",
    "ResponseState",
    "StagePipeline",
    "Transaction",
    "setup_http_client",
]
