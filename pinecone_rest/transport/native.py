"""Native transport: httpx async clients, one per running event loop."""

import asyncio
import threading
from typing import Any

import httpx

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.exceptions import TransportError, TransportErrorKind
from pinecone_rest.logging_config import get_logger
from pinecone_rest.transport.base import RawResponse, Transport, classify_failure

logger = get_logger(__name__)


class NativeTransport(Transport):
    """Transport for multi-threaded hosts.

    An ``httpx.AsyncClient`` is bound to the event loop it first ran on, so
    the transport keeps one client per loop. Threads that each run their own
    loop can share one transport. Cancelling a send (for example when its
    deadline expires) aborts the exchange and drops its connection.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 8,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the native transport.

        Args:
            timeout: Default request timeout in seconds.
            max_connections: Connection pool size of each client.
            transport: httpx transport shared by the clients (for testing).
        """
        self._timeout = timeout
        self._max_connections = max_connections
        self._transport = transport
        self._clients: dict[int, tuple[asyncio.AbstractEventLoop, httpx.AsyncClient]] = {}
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client of the running event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            for key, (owner, _) in list(self._clients.items()):
                if owner.is_closed():
                    del self._clients[key]
            entry = self._clients.get(id(loop))
            if entry is None or entry[0] is not loop:
                client = httpx.AsyncClient(
                    timeout=self._timeout,
                    limits=httpx.Limits(max_connections=self._max_connections),
                    transport=self._transport,
                )
                entry = (loop, client)
                self._clients[id(loop)] = entry
            return entry[1]

    async def _send(
        self,
        request: WireRequest,
        timeout: float | None,
    ) -> RawResponse:
        client = self._get_client()
        kwargs: dict[str, Any] = {"headers": request.headers}
        if request.body is not None:
            kwargs["content"] = request.body
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await client.request(request.method, request.url, **kwargs)

        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {e}", extra={"url": request.url})
            raise TransportError(
                f"{request.operation} request timed out",
                kind=TransportErrorKind.TIMEOUT,
                details={"url": request.url, "timeout": timeout or self._timeout},
            ) from e

        except httpx.ConnectError as e:
            kind = classify_failure(f"{e} {e.__cause__ or ''}")
            logger.error(f"Connection error: {e}", extra={"url": request.url})
            raise TransportError(
                f"Failed to connect to service: {e}",
                kind=kind,
                details={"url": request.url},
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Request error: {e}", extra={"url": request.url})
            raise TransportError(
                f"Request to service failed: {e}",
                kind=TransportErrorKind.PROTOCOL,
                details={"url": request.url},
            ) from e

        return RawResponse(
            status_code=response.status_code,
            headers={key.lower(): value for key, value in response.headers.items()},
            body=response.content,
        )

    async def close(self) -> None:
        """Close the clients.

        The running loop's client is closed here. Clients of other loops
        still running are closed on their own loop.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            clients, self._clients = list(self._clients.values()), {}
        for owner, client in clients:
            if owner is loop:
                await client.aclose()
            elif owner.is_running():
                asyncio.run_coroutine_threadsafe(client.aclose(), owner)
