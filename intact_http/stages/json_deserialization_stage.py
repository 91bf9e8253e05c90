import copy
import json
import logging
from typing import Any, ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.transaction import Transaction
from intact_http.exceptions import DeserializationError, EmptyBodyError
from intact_http.core.contract import StageContract
from intact_http.stages.response_stage import ResponseStage

logger = logging.getLogger(__name__)


class JsonDeserializationStage(ResponseStage):
    """Parses the JSON response body into `transaction.parsed_body`.

    The body is buffered before parsing, so the caller can still read the raw
    bytes afterwards. An empty body parses to `empty_default`, or raises
    `EmptyBodyError` when `on_empty` is "raise". If the response was not
    supposed to be empty, because it declared a Content-Length or the
    transport logged bytes for it, the stage warns and sets
    `transaction.data["body_truncated"]`.

    Attributes:
        on_empty (Literal["default", "raise"]): What to do with a zero-length body.
        empty_default (Any): Value used for an empty body when `on_empty` is "default".
    """

    name: Optional[str] = Field(default="JsonDeserializationStage")
    on_empty: Literal["default", "raise"] = Field(default="default")
    empty_default: Any = Field(default_factory=dict)
    logger: logging.Logger = Field(default_factory=lambda: logger, exclude=True)

    nullable_config: ClassVar[FrozenSet[str]] = frozenset({"empty_default"})

    @property
    def contract(self) -> StageContract:
        return StageContract(reads_body=True, buffers_body=True, deserializes_body=True)

    def _expected_body_bytes(self, transaction: Transaction) -> Optional[int]:
        """Bytes the body should have had according to the wire, if known."""
        transport_bytes = transaction.data.get("transport_body_bytes")
        if transport_bytes:
            return int(transport_bytes)
        response = transaction.response
        if response is None or response.content_encoding:
            return None
        declared = response.declared_content_length
        return declared if declared else None

    async def apply(self, transaction: Transaction, container: DependencyContainer) -> Transaction:
        response = self.require_response(transaction)
        tx_id = transaction.transaction_id
        content = await response.body.tee()

        if not content:
            expected = self._expected_body_bytes(transaction)
            if expected:
                transaction.data["body_truncated"] = True
                self.logger.warning(
                    f"[{tx_id}] Received a 0-byte body for a response that carried {expected} bytes on the wire. "
                    f"A stage before {self.name} consumed the body without buffering it. "
                    f"Stages applied: {transaction.stages_applied}"
                )
            if self.on_empty == "raise":
                raise EmptyBodyError(f"[{tx_id}] Response body is empty", stage_name=self.name)
            transaction.parsed_body = copy.deepcopy(self.empty_default)
            self.logger.info(f"[{tx_id}] Empty body parsed to default {transaction.parsed_body!r} ({self.name})")
            return transaction

        try:
            transaction.parsed_body = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DeserializationError(
                f"[{tx_id}] Response body is not valid JSON: {e}", stage_name=self.name
            ) from e

        self.logger.debug(f"[{tx_id}] Parsed {len(content)}-byte JSON body ({self.name})")
        return transaction
