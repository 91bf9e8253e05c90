"""Client that sends a request and runs the response through a declared stage pipeline."""

import datetime
import logging
import time
from typing import Any, Optional

import httpx

from intact_http.client_config import ClientConfig, setup_http_client
from intact_http.core.contract import check_stage_order, describe_contract
from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.response import PipelineResponse
from intact_http.core.transaction import Transaction
from intact_http.exceptions import RequestTimeoutError, StageOrderingError
from intact_http.settings import Settings
from intact_http.stages.json_deserialization_stage import JsonDeserializationStage
from intact_http.stages.loader import load_pipeline_from_file
from intact_http.stages.pipeline import StagePipeline
from intact_http.transport import LOGGED_BODY_BYTES_EXTENSION, logging_contract

logger = logging.getLogger(__name__)

TIMEOUT_KINDS = (
    (httpx.ConnectTimeout, "connect"),
    (httpx.ReadTimeout, "read"),
    (httpx.WriteTimeout, "write"),
    (httpx.PoolTimeout, "pool"),
)


def default_pipeline() -> StagePipeline:
    return StagePipeline(stages=[JsonDeserializationStage()], name="DefaultPipeline")


class PipelineClient:
    """Sends requests with a configured httpx client and delivers each response
    through a `StagePipeline`.

    Body logging is done by the transport beneath the pipeline. The client
    buffers whatever body is left after the pipeline so the caller can read it
    from the returned transaction after the connection is released.

    Attributes:
        pipeline (StagePipeline): Stages applied to every response.
        config (ClientConfig): Timeouts and transport logging settings.
        http_client (httpx.AsyncClient): The underlying client.
    """

    def __init__(
        self,
        pipeline: Optional[StagePipeline] = None,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            pipeline: Stages to apply. Defaults to a single JSON deserialization stage.
            config: Client configuration. Defaults to one built from `settings`.
            http_client: A preconfigured client. When given, `config` and
                `transport` are not applied to it and the caller keeps ownership.
            settings: Settings used for defaults.
            transport: Network transport for the owned client (e.g. `httpx.MockTransport`).
        """
        self.settings = settings or Settings()
        self.config = config or ClientConfig.from_settings(self.settings)
        self.pipeline = pipeline or default_pipeline()
        self._check_caller_receives_body()
        self._owns_client = http_client is None
        self.http_client = http_client or setup_http_client(self.config, transport=transport)
        self.container = DependencyContainer(settings=self.settings, http_client=self.http_client)
        self._log_response_chain()

    def _check_caller_receives_body(self) -> None:
        """The caller reads the body after the last stage, so no stage may consume it unbuffered."""
        violations = check_stage_order(self.pipeline.stages, final_reader="caller")
        caller_violations = [v for v in violations if v.starved_index is None]
        if not caller_violations:
            return
        details = "; ".join(str(v) for v in caller_violations)
        if self.pipeline.enforce_contract:
            raise StageOrderingError(
                f"StagePipeline '{self.pipeline.name}' would deliver an empty body: {details}", caller_violations
            )
        logger.warning(f"StagePipeline '{self.pipeline.name}' contract not enforced: {details}")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "PipelineClient":
        """Builds a client whose pipeline is loaded from PIPELINE_FILEPATH, if set."""
        settings = settings or Settings()
        filepath = settings.get_pipeline_filepath()
        pipeline = load_pipeline_from_file(filepath) if filepath else None
        return cls(pipeline=pipeline, settings=settings, **kwargs)

    def _log_response_chain(self) -> None:
        chain = []
        if self._owns_client:
            contract = logging_contract(self.config.body_log_level)
            chain.append(
                f"transport HttpLoggingTransport(level={self.config.body_log_level.value}; {describe_contract(contract)})"
            )
        for i, stage in enumerate(self.pipeline.stages):
            chain.append(f"{i + 1}. {stage.display_name} ({describe_contract(stage.contract)})")
        logger.debug(f"Response chain for {self.pipeline.name}: {' -> '.join(chain) or 'empty'}")

    def _timeout_error(self, error: httpx.TimeoutException, request: httpx.Request) -> RequestTimeoutError:
        kind = next((name for exc_type, name in TIMEOUT_KINDS if isinstance(error, exc_type)), "unknown")
        limits = {
            "connect": self.config.connect_timeout,
            "read": self.config.read_timeout,
            "write": self.config.write_timeout,
            "pool": self.config.pool_timeout or self.config.connect_timeout,
        }
        limit = f" after {limits[kind]}s" if kind in limits and self._owns_client else ""
        detail = f"{kind} timeout{limit} for {request.method} {request.url}"
        logger.error(f"Request failed: {detail}")
        return RequestTimeoutError(detail, timeout_kind=kind, url=str(request.url))

    async def request(self, method: str, url: str, **kwargs: Any) -> Transaction:
        """Sends a request and returns the transaction after the pipeline has run.

        Args:
            method: HTTP method.
            url: Absolute URL, or a path relative to the client's base_url.
            **kwargs: Passed to `httpx.AsyncClient.build_request` (params, json, content, headers, ...).

        Raises:
            RequestTimeoutError: A connect, read, write or pool timeout was exceeded.
                No partial body is delivered.
            Exception: Anything raised by a stage.
        """
        request = self.http_client.build_request(method, url, **kwargs)
        transaction = Transaction(request=request)
        tx_id = transaction.transaction_id
        logger.info(f"[{tx_id}] Sending {request.method} {request.url}")

        start = time.perf_counter()
        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise self._timeout_error(e, request) from e

        pipeline_response = PipelineResponse.from_httpx(response)
        transaction.response = pipeline_response
        logged_bytes = response.extensions.get(LOGGED_BODY_BYTES_EXTENSION)
        if logged_bytes is not None:
            transaction.data["transport_body_bytes"] = logged_bytes

        try:
            transaction = await self.pipeline.apply(transaction, self.container)
            await pipeline_response.body.buffer()
        except httpx.TimeoutException as e:
            raise self._timeout_error(e, request) from e
        finally:
            await pipeline_response.body.aclose()

        try:
            pipeline_response.elapsed = response.elapsed
        except RuntimeError:
            # Set by httpx only when it closes the stream; a response read on construction never gets it
            pipeline_response.elapsed = datetime.timedelta(seconds=time.perf_counter() - start)
        transaction.mark_delivered()
        logger.info(
            f"[{tx_id}] Delivered {response.status_code} response "
            f"({pipeline_response.body.bytes_read}-byte body) after stages {transaction.stages_applied}"
        )
        return transaction

    async def get(self, url: str, **kwargs: Any) -> Transaction:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Transaction:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        """Closes the underlying client if this instance created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "PipelineClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
