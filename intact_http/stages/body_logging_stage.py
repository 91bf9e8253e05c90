import logging
from typing import Optional

from pydantic import Field

from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.transaction import Transaction
from intact_http.core.contract import StageContract
from intact_http.stages.response_stage import ResponseStage
from intact_http.transport.redaction import MAX_CONTENT_BYTES_LOG, is_probably_text, truncate_for_log

logger = logging.getLogger(__name__)


class BodyLoggingStage(ResponseStage):
    """Logs the response body from above the transport.

    With `buffer_body=True` (the default) the stage tees the body: it logs a
    copy and every later stage reads the same bytes. With `buffer_body=False`
    it drains the stream and discards it, so it may only be the last stage
    that reads the body. Pipelines reject any other placement.

    Attributes:
        buffer_body (bool): Whether the body is replayed to later readers.
        max_body_log_bytes (int): Longest body text written to the log.
    """

    name: Optional[str] = Field(default="BodyLoggingStage")
    buffer_body: bool = Field(default=True)
    max_body_log_bytes: int = Field(default=MAX_CONTENT_BYTES_LOG, gt=0)
    logger: logging.Logger = Field(default_factory=lambda: logger, exclude=True)

    @property
    def contract(self) -> StageContract:
        return StageContract(reads_body=True, buffers_body=self.buffer_body)

    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        response = self.require_response(transaction)
        tx_id = transaction.transaction_id

        if self.buffer_body:
            content = await response.body.tee()
        else:
            content = await response.body.read()

        if not content:
            self.logger.info(f"[{tx_id}] <-- {response.status_code} (0-byte body) ({self.name})")
        elif is_probably_text(content, response.headers.get("content-type")):
            text = truncate_for_log(content.decode("utf-8", errors="replace"), self.max_body_log_bytes)
            self.logger.info(f"[{tx_id}] <-- {response.status_code} ({len(content)}-byte body) ({self.name})")
            self.logger.info(f"[{tx_id}] {text}")
        else:
            self.logger.info(
                f"[{tx_id}] <-- {response.status_code} (binary {len(content)}-byte body omitted) ({self.name})"
            )
        return transaction
