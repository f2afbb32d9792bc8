"""Client exception hierarchy.

All custom exceptions inherit from PineconeClientError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "PC-1000"
    CONFIGURATION_ERROR = "PC-1001"
    VALIDATION_ERROR = "PC-1002"
    INVALID_VECTOR = "PC-1003"

    # Transport errors (2xxx)
    TRANSPORT_ERROR = "PC-2000"
    TRANSPORT_TIMEOUT = "PC-2001"

    # Response errors (3xxx)
    DECODE_ERROR = "PC-3000"

    # Client-side service rejections (4xxx)
    CLIENT_ERROR = "PC-4000"
    AUTH_ERROR = "PC-4001"
    NOT_FOUND = "PC-4004"
    SERVER_VALIDATION_ERROR = "PC-4002"
    RATE_LIMITED = "PC-4029"

    # Server errors (5xxx)
    SERVER_ERROR = "PC-5000"

    # Batch errors (6xxx)
    PARTIAL_FAILURE = "PC-6000"


class TransportErrorKind(str, Enum):
    """Failure classes shared by every transport implementation."""

    CONNECT = "connect"
    TIMEOUT = "timeout"
    TLS = "tls"
    DNS = "dns"
    PROTOCOL = "protocol"


class PineconeClientError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured reporting."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(PineconeClientError):
    """Client configuration error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(PineconeClientError):
    """Caller input rejected before any network call."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class InvalidVector(ValidationError):
    """Vector with non-finite or otherwise malformed components."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_VECTOR, details)


class TransportError(PineconeClientError):
    """No usable response was exchanged with the service."""

    def __init__(
        self,
        message: str,
        kind: TransportErrorKind = TransportErrorKind.CONNECT,
        details: dict[str, Any] | None = None,
    ) -> None:
        code = (
            ErrorCode.TRANSPORT_TIMEOUT
            if kind == TransportErrorKind.TIMEOUT
            else ErrorCode.TRANSPORT_ERROR
        )
        self.kind = kind
        super().__init__(message, code, {"kind": kind.value, **(details or {})})


class DecodeError(PineconeClientError):
    """Response bytes were received but could not be interpreted."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(
            message,
            ErrorCode.DECODE_ERROR,
            {"status_code": status_code, **(details or {})},
        )


class ClientError(PineconeClientError):
    """The service rejected the request with a 4xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        code: ErrorCode = ErrorCode.CLIENT_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, code, {"status_code": status_code, **(details or {})})


class AuthError(ClientError):
    """Credential missing, invalid or lacking permission (401/403)."""

    def __init__(
        self,
        message: str,
        status_code: int = 401,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, ErrorCode.AUTH_ERROR, details)


class NotFound(ClientError):
    """Unknown index, namespace or route (404)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, 404, ErrorCode.NOT_FOUND, details)


class ServerValidationError(ClientError, ValidationError):
    """Request rejected by the service as malformed (400)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        ClientError.__init__(
            self, message, 400, ErrorCode.SERVER_VALIDATION_ERROR, details
        )


class RateLimited(ClientError):
    """Too many requests (429).

    Attributes:
        retry_after: Seconds the service asked the caller to wait, if given.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(
            message,
            429,
            ErrorCode.RATE_LIMITED,
            {"retry_after": retry_after, **(details or {})},
        )


class ServerError(PineconeClientError):
    """The service failed with a 5xx status. Safe for callers to retry."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            message,
            ErrorCode.SERVER_ERROR,
            {"status_code": status_code, "body": body, **(details or {})},
        )


class ItemOutcome:
    """Outcome of one caller-supplied item inside a batch operation."""

    __slots__ = ("index", "id", "error")

    def __init__(
        self,
        index: int,
        id: str,
        error: PineconeClientError | None = None,
    ) -> None:
        self.index = index
        self.id = id
        self.error = error

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "index": self.index,
            "id": self.id,
            "succeeded": self.succeeded,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()["error"]
        return data

    def __repr__(self) -> str:
        status = "ok" if self.succeeded else type(self.error).__name__
        return f"ItemOutcome(index={self.index}, id={self.id!r}, {status})"


class PartialFailure(PineconeClientError):
    """A batch operation succeeded for some items and failed for others.

    Attributes:
        operation: Name of the batch operation.
        outcomes: One outcome per caller item, in the caller's original order.
    """

    def __init__(
        self,
        operation: str,
        outcomes: list[ItemOutcome],
    ) -> None:
        self.operation = operation
        self.outcomes = outcomes
        failed = [o.index for o in outcomes if not o.succeeded]
        super().__init__(
            f"{operation} failed for {len(failed)} of {len(outcomes)} items",
            ErrorCode.PARTIAL_FAILURE,
            {"operation": operation, "items": [o.to_dict() for o in outcomes]},
        )

    @property
    def failed_indices(self) -> list[int]:
        return [o.index for o in self.outcomes if not o.succeeded]

    @property
    def succeeded_indices(self) -> list[int]:
        return [o.index for o in self.outcomes if o.succeeded]

    def failed_items(self) -> list[ItemOutcome]:
        """Outcomes of the items the caller should resubmit."""
        return [o for o in self.outcomes if not o.succeeded]
