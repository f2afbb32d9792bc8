"""Index client: the public entry point for vector operations."""

import asyncio
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from pinecone_rest import __version__
from pinecone_rest.builder.models import WireRequest
from pinecone_rest.builder.service import RequestBuilder
from pinecone_rest.client.models import ClientConfig
from pinecone_rest.config import PineconeSettings
from pinecone_rest.decoder.service import ResponseDecoder
from pinecone_rest.exceptions import (
    ItemOutcome,
    PartialFailure,
    PineconeClientError,
    ValidationError,
)
from pinecone_rest.logging_config import get_logger
from pinecone_rest.observability.metrics import track_batch, track_request
from pinecone_rest.payload.filters import MetadataFilter
from pinecone_rest.payload.models import (
    FetchResult,
    IndexDescriptor,
    IndexStats,
    NamespaceSummary,
    QueryRequest,
    QueryResult,
    UpdateRequest,
    UpsertResult,
    Vector,
)
from pinecone_rest.transport import Transport, default_transport
from pinecone_rest.transport.base import RawResponse

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")
Decode = Callable[[WireRequest, RawResponse], ResultT]


def _coerce_vectors(vectors: Iterable[Vector | Mapping[str, Any]]) -> list[Vector]:
    coerced = []
    for position, vector in enumerate(vectors):
        if isinstance(vector, Vector):
            coerced.append(vector)
            continue
        try:
            coerced.append(Vector.model_validate(vector))
        except ValidationError as e:
            e.details["index"] = position
            raise
    return coerced


def _status_label(error: PineconeClientError) -> str:
    return error.code.name.lower()


class IndexClient:
    """Async client for one index.

    The configuration is immutable, so one client may be shared freely
    between tasks and, with the native transport, between threads. Every
    operation validates its input before any network I/O, so validation
    errors never cost a round-trip.

    Example:
        async with IndexClient(config) as index:
            await index.upsert([Vector(id="v1", values=[0.1, 0.2, 0.3])])
            result = await index.query(QueryRequest(top_k=1, vector=[0.1, 0.2, 0.3]))
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Connection configuration.
            transport: Transport to use. Defaults to the one matching the
                build target.
        """
        self._config = config
        self._builder = RequestBuilder(
            endpoint=config.endpoint,
            api_key=config.api_key.get_secret_value(),
            index_name=config.index_name,
            control_plane_url=config.controller_url,
            max_batch_size=config.max_batch_size,
            dimension=config.dimension,
            user_agent=f"pinecone-rest-python/{__version__}",
        )
        self._decoder = ResponseDecoder()
        self._transport = transport or default_transport(
            timeout=config.timeout,
            max_connections=config.max_concurrent_requests,
        )
        self._owns_transport = transport is None

    @classmethod
    def from_settings(
        cls,
        settings: PineconeSettings | None = None,
        transport: Transport | None = None,
    ) -> "IndexClient":
        """Create a client from environment-backed settings."""
        return cls(ClientConfig.from_settings(settings), transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "IndexClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _namespace(self, namespace: str | None) -> str:
        return self._config.namespace if namespace is None else namespace

    def _timeout(self, timeout: float | None) -> float:
        return self._config.timeout if timeout is None else timeout

    async def _single(
        self,
        request: WireRequest,
        decode: Decode[ResultT],
        timeout: float | None,
    ) -> ResultT:
        start = time.perf_counter()
        status = "success"
        try:
            response = await self._transport.send(request, self._timeout(timeout))
            return decode(request, response)
        except PineconeClientError as e:
            status = _status_label(e)
            raise
        finally:
            track_request(request.operation, time.perf_counter() - start, status)

    async def _batch(
        self,
        requests: Sequence[WireRequest],
        decode: Decode[ResultT],
        timeout: float | None,
    ) -> list[ResultT]:
        """Send the sub-requests of one batch and merge them in input order.

        Sub-requests run concurrently, bounded by ``max_concurrent_requests``,
        and share one deadline. Results come back in request order whatever
        the completion order.

        Raises:
            PartialFailure: If some items succeeded and others failed.
            PineconeClientError: The first error, if no item succeeded.
        """
        operation = requests[0].operation
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout(timeout)
        semaphore = asyncio.Semaphore(self._config.max_concurrent_requests)
        start = time.perf_counter()

        async def run(request: WireRequest) -> tuple[ResultT, list[ItemOutcome]]:
            async with semaphore:
                response = await self._transport.send(request, deadline - loop.time())
            return (
                decode(request, response),
                self._decoder.item_outcomes(request, response),
            )

        settled = await asyncio.gather(
            *(run(request) for request in requests),
            return_exceptions=True,
        )

        results: list[ResultT] = []
        outcomes: list[ItemOutcome] = []
        errors: list[PineconeClientError] = []
        for request, outcome in zip(requests, settled):
            if isinstance(outcome, PineconeClientError):
                errors.append(outcome)
                outcomes.extend(
                    ItemOutcome(request.item_offset + position, item_id, outcome)
                    for position, item_id in enumerate(request.item_ids)
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result, items = outcome
                results.append(result)
                outcomes.extend(items)

        track_batch(operation, len(outcomes), len(requests))
        failed = [o for o in outcomes if not o.succeeded]
        status = "success"
        try:
            if not failed:
                return results
            if errors and len(failed) == len(outcomes):
                status = _status_label(errors[0])
                raise errors[0]
            status = "partial_failure"
            logger.warning(
                f"{operation} failed for {len(failed)} of {len(outcomes)} items",
                extra={"failed_indices": [o.index for o in failed]},
            )
            raise PartialFailure(operation, outcomes)
        finally:
            track_request(operation, time.perf_counter() - start, status)

    async def upsert(
        self,
        vectors: Iterable[Vector | Mapping[str, Any]],
        namespace: str | None = None,
        timeout: float | None = None,
    ) -> UpsertResult:
        """Insert or overwrite vectors.

        Batches larger than ``max_batch_size`` are split into several wire
        requests. Upserting an existing id overwrites it.

        Args:
            vectors: Vectors, or mappings with vector fields.
            namespace: Target namespace (default: the client's namespace).
            timeout: Deadline in seconds for the whole batch.

        Returns:
            UpsertResult with the total upserted count.

        Raises:
            ValidationError: If the batch is empty or a dimension mismatches.
            PartialFailure: If only some vectors were accepted.
        """
        batch = _coerce_vectors(vectors)
        requests = self._builder.build_upsert(self._namespace(namespace), batch)
        results = await self._batch(requests, self._decoder.decode_upsert, timeout)
        return UpsertResult(
            upserted_count=sum(result.upserted_count for result in results)
        )

    async def query(
        self,
        request: QueryRequest,
        timeout: float | None = None,
    ) -> QueryResult:
        """Find the stored vectors most similar to a query vector or id.

        Raises:
            ValidationError: On invalid top_k, query point or dimension.
        """
        wire = self._builder.build_query(request, self._namespace(request.namespace))
        return await self._single(wire, self._decoder.decode_query, timeout)

    async def fetch(
        self,
        ids: Sequence[str],
        namespace: str | None = None,
        timeout: float | None = None,
    ) -> FetchResult:
        """Look up vectors by id. Missing ids are absent from the result."""
        wire = self._builder.build_fetch(self._namespace(namespace), list(ids))
        return await self._single(wire, self._decoder.decode_fetch, timeout)

    async def delete(
        self,
        ids: Sequence[str] | None = None,
        filter: MetadataFilter | None = None,
        delete_all: bool = False,
        namespace: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Delete vectors by id list, by metadata filter, or all of a namespace.

        Exactly one mode must be given.

        Raises:
            ValidationError: If zero or several modes are given.
            PartialFailure: If only some id sub-batches were deleted.
        """
        requests = self._builder.build_delete(
            self._namespace(namespace),
            ids=list(ids) if ids is not None else None,
            filter=filter,
            delete_all=delete_all,
        )
        if len(requests) == 1 and not requests[0].item_ids:
            await self._single(requests[0], self._decoder.decode_empty, timeout)
            return
        await self._batch(requests, self._decoder.decode_empty, timeout)

    async def update(
        self,
        request: UpdateRequest,
        timeout: float | None = None,
    ) -> None:
        """Update values or merge metadata of one stored vector."""
        wire = self._builder.build_update(request, self._namespace(request.namespace))
        await self._single(wire, self._decoder.decode_empty, timeout)

    async def describe_index(self, timeout: float | None = None) -> IndexDescriptor:
        """Fetch the index description from the controller."""
        wire = self._builder.build_describe_index()
        return await self._single(wire, self._decoder.decode_describe_index, timeout)

    async def describe_index_stats(
        self,
        filter: MetadataFilter | None = None,
        timeout: float | None = None,
    ) -> IndexStats:
        """Fetch vector counts per namespace, optionally restricted by filter."""
        wire = self._builder.build_describe_index_stats(filter)
        return await self._single(wire, self._decoder.decode_index_stats, timeout)

    async def list_namespaces(
        self,
        timeout: float | None = None,
    ) -> list[NamespaceSummary]:
        """List the namespaces holding vectors, in the order the service reports."""
        wire = self._builder.build_list_namespaces()
        return await self._single(wire, self._decoder.decode_list_namespaces, timeout)

    async def configure_index(
        self,
        replicas: int | None = None,
        pod_type: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Change replica count or pod type. Returns the controller's message."""
        wire = self._builder.build_configure_index(replicas, pod_type)
        return await self._single(wire, self._decoder.decode_text, timeout)

    async def delete_index(self, timeout: float | None = None) -> str:
        """Delete the index and every vector in it.

        Returns:
            The controller's acknowledgement message.

        Raises:
            NotFound: If the index does not exist.
        """
        wire = self._builder.build_delete_index()
        return await self._single(wire, self._decoder.decode_text, timeout)
