"""Verbosity levels for transport-level HTTP logging."""

from enum import Enum

from intact_http.exceptions import ConfigurationError

_ALIASES = {
    "OFF": "NONE",
    "HEADERS-ONLY": "HEADERS",
    "HEADERS_ONLY": "HEADERS",
    "FULL-BODY": "BODY",
    "FULL_BODY": "BODY",
    "FULL": "BODY",
}


class BodyLogLevel(str, Enum):
    """How much of each exchange the transport logger writes.

    NONE logs nothing. BASIC logs request and response lines. HEADERS adds the
    headers. BODY adds the bodies, which requires buffering the response.
    """

    NONE = "NONE"
    BASIC = "BASIC"
    HEADERS = "HEADERS"
    BODY = "BODY"

    @classmethod
    def parse(cls, value: "str | BodyLogLevel") -> "BodyLogLevel":
        if isinstance(value, BodyLogLevel):
            return value
        name = str(value).strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(level.value for level in cls)
            raise ConfigurationError(f"Invalid body log level '{value}'. Valid levels are: {valid}")

    @property
    def logs_headers(self) -> bool:
        return self in (BodyLogLevel.HEADERS, BodyLogLevel.BODY)

    @property
    def logs_body(self) -> bool:
        return self is BodyLogLevel.BODY
