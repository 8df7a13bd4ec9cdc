# error taxonomy shared by the server (classifier, frame encoder) and the client (stream consumer)

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    AUTH = "AuthError"
    RATE_LIMITED = "RateLimited"
    MODEL_NOT_FOUND = "ModelNotFound"
    REQUEST_TOO_LARGE = "RequestTooLarge"
    BILLING = "BillingError"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"
    TRANSPORT = "TransportError"
    MALFORMED_STREAM = "MalformedStream"

    @classmethod
    def parse(cls, value: Any) -> "ErrorKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# status codes the server uses for each kind; used to recover a kind from a bare HTTP status
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.AUTH: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.MODEL_NOT_FOUND: 404,
    ErrorKind.REQUEST_TOO_LARGE: 400,
    ErrorKind.BILLING: 402,
    ErrorKind.TIMEOUT: 504,
}


class GenerationError(Exception):
    """A classified generation failure, as seen by whoever consumes the generation."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: int = 500,
        provider: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status
        self.provider = provider

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value, "status": self.status}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GenerationError":
        kind = ErrorKind.parse(payload.get("kind"))
        status = payload.get("status")
        if not isinstance(status, int):
            status = STATUS_BY_KIND.get(kind, 500)
        return cls(str(payload.get("error") or "Unknown error"), kind=kind, status=status)


class TransportError(GenerationError):
    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.TRANSPORT, status=502)


class MalformedStreamError(GenerationError):
    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.MALFORMED_STREAM, status=502)


class StreamTimeoutError(GenerationError):
    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.TIMEOUT, status=504)
