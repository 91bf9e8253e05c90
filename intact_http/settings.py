import os
from typing import Optional

from dotenv import load_dotenv

from intact_http.exceptions import ConfigurationError

# Load .env file variables into environment
load_dotenv()

DEFAULT_TIMEOUT_SECONDS = 30.0


class Settings:
    """Configuration settings loaded from environment variables."""

    # --- HTTP Client Settings ---
    HTTP_CONNECT_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS
    HTTP_READ_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS
    HTTP_WRITE_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS
    HTTP_BODY_LOG_LEVEL: str = "BODY"

    # --- Pipeline Settings ---
    PIPELINE_FILEPATH: Optional[str] = None

    def _get_timeout(self, env_var: str) -> float:
        value_str = os.getenv(env_var)
        if value_str is None or value_str == "":
            return DEFAULT_TIMEOUT_SECONDS
        try:
            value = float(value_str)
        except ValueError:
            raise ConfigurationError(f"{env_var} environment variable must be a number of seconds.")
        if value <= 0:
            raise ConfigurationError(f"{env_var} environment variable must be positive, got {value_str}.")
        return value

    # --- HTTP Client Getters ---
    def get_connect_timeout(self) -> float:
        """Returns the connect timeout in seconds."""
        return self._get_timeout("HTTP_CONNECT_TIMEOUT")

    def get_read_timeout(self) -> float:
        """Returns the read timeout in seconds."""
        return self._get_timeout("HTTP_READ_TIMEOUT")

    def get_write_timeout(self) -> float:
        """Returns the write timeout in seconds."""
        return self._get_timeout("HTTP_WRITE_TIMEOUT")

    def get_body_log_level(self, default: str = "BODY") -> str:
        """Returns the transport body log level name (NONE, BASIC, HEADERS or BODY)."""
        return os.getenv("HTTP_BODY_LOG_LEVEL", default).strip().upper()

    def get_max_body_log_bytes(self) -> int:
        """Returns the maximum number of body bytes written to a single log record."""
        try:
            return int(os.getenv("HTTP_MAX_BODY_LOG_BYTES", str(1024 * 10)))
        except ValueError:
            raise ConfigurationError("HTTP_MAX_BODY_LOG_BYTES environment variable must be an integer.")

    # --- Pipeline Getters ---
    def get_pipeline_filepath(self) -> Optional[str]:
        """Returns the path to the stage pipeline file, if set."""
        return os.getenv("PIPELINE_FILEPATH")

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()
