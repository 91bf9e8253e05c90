# Exceptions raised while configuring the client or processing a response.

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from intact_http.core.contract import ContractViolation


class IntactHttpError(Exception):
    """Base exception for all intact_http errors."""

    def __init__(self, *args, stage_name: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(*args)
        self.stage_name = stage_name
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class ConfigurationError(ValueError, IntactHttpError):
    """Raised when a setting or client configuration value is invalid."""

    def __init__(self, *args, detail: Optional[str] = None):
        IntactHttpError.__init__(self, *args, detail=detail)


class StageLoadError(ValueError, IntactHttpError):
    """Raised when a stage or pipeline cannot be loaded from its serialized form."""

    def __init__(self, *args, stage_name: Optional[str] = None, detail: Optional[str] = None):
        IntactHttpError.__init__(self, *args, stage_name=stage_name, detail=detail)


class StageOrderingError(IntactHttpError):
    """Raised when a pipeline declares stages in an order that would lose the response body."""

    def __init__(self, message: str, violations: List["ContractViolation"]):
        super().__init__(message)
        self.violations = violations


class EmptyBodyError(IntactHttpError):
    """Raised when a stage that requires a body receives zero bytes."""

    pass


class DeserializationError(IntactHttpError):
    """Raised when a response body cannot be parsed."""

    pass


class RequestTimeoutError(IntactHttpError):
    """Raised when the transport gives up on a request because a timeout was exceeded.

    Attributes:
        timeout_kind: One of "connect", "read", "write" or "pool".
        url: The URL of the request that timed out, if known.
    """

    def __init__(self, detail: str, timeout_kind: str, url: Optional[str] = None):
        super().__init__(detail, detail=detail)
        self.timeout_kind = timeout_kind
        self.url = url


class NoResponseError(IntactHttpError):
    """Raised when a stage runs on a transaction that has no response yet."""

    pass
