from .log_level import BodyLogLevel
from .logging_transport import LOGGED_BODY_BYTES_EXTENSION, HttpLoggingTransport, logging_contract

__all__ = ["BodyLogLevel", "HttpLoggingTransport", "LOGGED_BODY_BYTES_EXTENSION", "logging_contract"]
