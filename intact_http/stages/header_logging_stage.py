import logging
from typing import List, Optional

from pydantic import Field

from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.transaction import Transaction
from intact_http.stages.response_stage import ResponseStage
from intact_http.transport.redaction import sanitize_headers

logger = logging.getLogger(__name__)


class HeaderLoggingStage(ResponseStage):
    """Logs the status line and headers of the response. Never reads the body.

    Attributes:
        redact_headers (Optional[List[str]]): Header names whose values are
            hidden. None uses the default credential headers.
    """

    name: Optional[str] = Field(default="HeaderLoggingStage")
    redact_headers: Optional[List[str]] = Field(default=None)
    logger: logging.Logger = Field(default_factory=lambda: logger, exclude=True)

    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        response = self.require_response(transaction)
        tx_id = transaction.transaction_id
        self.logger.info(f"[{tx_id}] {response.status_code} {response.reason_phrase} {response.url or ''}".rstrip())
        for key, value in sanitize_headers(response.headers, self.redact_headers):
            self.logger.info(f"[{tx_id}] {key}: {value}")
        return transaction
