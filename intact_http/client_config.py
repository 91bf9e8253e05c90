"""HTTP client configuration: timeouts and transport-level logging."""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from intact_http.settings import DEFAULT_TIMEOUT_SECONDS, Settings
from intact_http.transport import BodyLogLevel, HttpLoggingTransport
from intact_http.transport.redaction import MAX_CONTENT_BYTES_LOG

logger = logging.getLogger(__name__)


class ClientConfig(BaseModel):
    """Transport settings for the pipeline's HTTP client.

    Attributes:
        connect_timeout: Seconds allowed to establish a connection.
        read_timeout: Seconds allowed between bytes received from the server.
        write_timeout: Seconds allowed to send each chunk of the request.
        pool_timeout: Seconds to wait for a free pooled connection. Falls back
            to the connect timeout.
        body_log_level: Verbosity of the transport logger.
        redact_headers: Header names hidden in log output. None uses the defaults.
        max_body_log_bytes: Longest body text written per log record.
    """

    model_config = ConfigDict(frozen=True)

    connect_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    read_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    write_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    pool_timeout: Optional[float] = Field(default=None, gt=0)
    body_log_level: BodyLogLevel = Field(default=BodyLogLevel.BODY)
    redact_headers: Optional[List[str]] = Field(default=None)
    max_body_log_bytes: int = Field(default=MAX_CONTENT_BYTES_LOG, gt=0)

    @field_validator("body_log_level", mode="before")
    @classmethod
    def parse_body_log_level(cls, value: Any) -> BodyLogLevel:
        return BodyLogLevel.parse(value)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        """Builds a config from environment-backed settings."""
        return cls(
            connect_timeout=settings.get_connect_timeout(),
            read_timeout=settings.get_read_timeout(),
            write_timeout=settings.get_write_timeout(),
            body_log_level=settings.get_body_log_level(),
            max_body_log_bytes=settings.get_max_body_log_bytes(),
        )

    def build_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout if self.pool_timeout is not None else self.connect_timeout,
        )

    def build_transport(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> HttpLoggingTransport:
        """Installs the logging transport beneath the client, around `transport`."""
        return HttpLoggingTransport(
            transport=transport,
            level=self.body_log_level,
            redact_headers=self.redact_headers,
            max_body_log_bytes=self.max_body_log_bytes,
        )


def setup_http_client(
    config: Optional[ClientConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Creates an `httpx.AsyncClient` with timeouts and transport-level logging.

    Body logging happens in the transport, below anything that deserializes
    the response, and the transport hands the buffered body upward intact.

    Args:
        config: Client configuration. Defaults to 30 second timeouts and BODY logging.
        transport: The transport that talks to the network. Defaults to
            `httpx.AsyncHTTPTransport`; tests pass `httpx.MockTransport`.
        **client_kwargs: Passed through to `httpx.AsyncClient` (base_url, headers, ...).

    Returns:
        The configured client. The caller owns it and must close it.
    """
    config = config or ClientConfig()
    logger.debug(
        f"Configuring HTTP client: connect={config.connect_timeout}s read={config.read_timeout}s "
        f"write={config.write_timeout}s body_log_level={config.body_log_level.value}"
    )
    return httpx.AsyncClient(
        timeout=config.build_timeout(),
        transport=config.build_transport(transport),
        **client_kwargs,
    )
