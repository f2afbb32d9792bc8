"""Transport module.

The implementation is fixed by the build target: Pyodide builds report
``sys.platform == "emscripten"`` and get the browser transport; every other
interpreter gets the native one.
"""

import sys

from pinecone_rest.transport.base import RawResponse, Transport, classify_failure
from pinecone_rest.transport.browser import BrowserTransport
from pinecone_rest.transport.native import NativeTransport

IS_BROWSER = sys.platform == "emscripten"


def default_transport(timeout: float = 30.0, max_connections: int = 8) -> Transport:
    """Create the transport for the current build target.

    Args:
        timeout: Default request timeout in seconds (native only).
        max_connections: Connection pool size of the native transport.

    Returns:
        A BrowserTransport under Pyodide, otherwise a NativeTransport.
    """
    if IS_BROWSER:
        return BrowserTransport()
    return NativeTransport(timeout=timeout, max_connections=max_connections)


__all__ = [
    "IS_BROWSER",
    "BrowserTransport",
    "NativeTransport",
    "RawResponse",
    "Transport",
    "classify_failure",
    "default_transport",
]
