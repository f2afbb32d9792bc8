"""Transport interface shared by the native and browser implementations."""

import asyncio
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.exceptions import TransportError, TransportErrorKind
from pinecone_rest.logging_config import get_logger

logger = get_logger(__name__)

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "name resolution",
    "err_name_not_resolved",
)
_TLS_MARKERS = ("ssl", "certificate", "tls", "handshake")


class RawResponse(BaseModel):
    """Undecoded response from the service.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers with lower-cased names.
        body: Raw response body.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(description="HTTP status code")
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = Field(default=b"")

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def classify_failure(message: str) -> TransportErrorKind:
    """Map a low-level connection failure message to a transport error kind."""
    lowered = message.lower()
    if any(marker in lowered for marker in _DNS_MARKERS):
        return TransportErrorKind.DNS
    if any(marker in lowered for marker in _TLS_MARKERS):
        return TransportErrorKind.TLS
    return TransportErrorKind.CONNECT


class Transport(ABC):
    """Abstract base class for transports.

    A transport sends one wire request and returns the raw response. Status
    codes are not interpreted here; only failures to exchange a response
    raise.
    """

    async def send(
        self,
        request: WireRequest,
        timeout: float | None = None,
    ) -> RawResponse:
        """Send a request, aborting it when ``timeout`` seconds elapse.

        Args:
            request: Request to send.
            timeout: Deadline in seconds, or None for no deadline.

        Returns:
            RawResponse for any HTTP status.

        Raises:
            TransportError: If no response could be obtained.
        """
        logger.debug(
            f"Sending {request.operation} request",
            extra={"method": request.method, "url": request.url},
        )
        if timeout is not None and timeout <= 0:
            raise TransportError(
                f"{request.operation} deadline expired before sending",
                kind=TransportErrorKind.TIMEOUT,
                details={"timeout": timeout},
            )
        try:
            return await asyncio.wait_for(self._send(request, timeout), timeout)
        except TimeoutError as e:
            logger.error(
                f"{request.operation} request timed out",
                extra={"url": request.url, "timeout": timeout},
            )
            raise TransportError(
                f"{request.operation} request timed out after {timeout}s",
                kind=TransportErrorKind.TIMEOUT,
                details={"timeout": timeout},
            ) from e

    @abstractmethod
    async def _send(
        self,
        request: WireRequest,
        timeout: float | None,
    ) -> RawResponse:
        """Perform the exchange. Implementations raise TransportError."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the connection pool."""
        ...
