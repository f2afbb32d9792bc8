"""Browser transport for Pyodide (WebAssembly) builds.

Requests go through the browser's ``fetch`` on the single-threaded event
loop. Work done here between awaits blocks the page, so the transport only
copies bytes in and out.
"""

import importlib
from collections.abc import Awaitable, Callable
from typing import Any

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.exceptions import ConfigurationError, TransportError
from pinecone_rest.logging_config import get_logger
from pinecone_rest.transport.base import RawResponse, Transport, classify_failure

logger = get_logger(__name__)

FetchFunction = Callable[..., Awaitable[Any]]


class BrowserTransport(Transport):
    """Transport for single-threaded browser hosts.

    Args:
        fetch: Coroutine function with the signature of
            ``pyodide.http.pyfetch``. Resolved from Pyodide on first use
            when omitted.
    """

    def __init__(self, fetch: FetchFunction | None = None) -> None:
        self._fetch = fetch

    def _get_fetch(self) -> FetchFunction:
        if self._fetch is None:
            try:
                module = importlib.import_module("pyodide.http")
            except ImportError as e:
                raise ConfigurationError(
                    "BrowserTransport requires the Pyodide runtime",
                ) from e
            self._fetch = module.pyfetch
        return self._fetch

    async def _send(
        self,
        request: WireRequest,
        timeout: float | None,
    ) -> RawResponse:
        fetch = self._get_fetch()
        options: dict[str, Any] = {
            "method": request.method,
            "headers": dict(request.headers),
        }
        if request.body is not None:
            options["body"] = request.body.decode("utf-8")

        try:
            response = await fetch(request.url, **options)
            body = await response.bytes()
        except OSError as e:
            # pyfetch reports network and CORS failures as OSError
            logger.error(f"Fetch failed: {e}", extra={"url": request.url})
            raise TransportError(
                f"Failed to reach service: {e}",
                kind=classify_failure(str(e)),
                details={"url": request.url},
            ) from e

        return RawResponse(
            status_code=response.status,
            headers={key.lower(): value for key, value in dict(response.headers).items()},
            body=bytes(body),
        )

    async def close(self) -> None:
        """Nothing to release; the browser owns the connection pool."""
        return None
