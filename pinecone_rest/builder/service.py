"""Request builder: typed inputs to wire requests.

Construction is pure. Nothing here performs I/O, so every validation error
surfaces before a request reaches a transport.
"""

import json
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote, urlencode

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.exceptions import ConfigurationError, ValidationError
from pinecone_rest.payload.filters import MetadataFilter, filter_to_wire
from pinecone_rest.payload.models import (
    MAX_TOP_K,
    QueryRequest,
    UpdateRequest,
    Vector,
)

DEFAULT_MAX_BATCH_SIZE = 100
MAX_BATCH_SIZE_LIMIT = 1000


def _encode(payload: dict[str, Any]) -> bytes:
    # No key sorting: filter and metadata order is significant to the service.
    try:
        text = json.dumps(
            payload,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e
    return text.encode("utf-8")


def _chunks(items: Sequence[Any], size: int) -> list[tuple[int, Sequence[Any]]]:
    return [(start, items[start : start + size]) for start in range(0, len(items), size)]


class RequestBuilder:
    """Builds wire requests for one index.

    Args:
        endpoint: Index host URL for data-plane operations.
        api_key: Credential sent in the ``Api-Key`` header.
        index_name: Name of the index.
        control_plane_url: Controller URL for index management operations.
        max_batch_size: Maximum vectors or ids per wire request.
        dimension: Index dimension, when known, for client-side checks.
        user_agent: Value of the ``User-Agent`` header.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        index_name: str,
        control_plane_url: str | None = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        dimension: int | None = None,
        user_agent: str = "pinecone-rest-python",
    ) -> None:
        if not 1 <= max_batch_size <= MAX_BATCH_SIZE_LIMIT:
            raise ConfigurationError(
                f"max_batch_size must be between 1 and {MAX_BATCH_SIZE_LIMIT}",
                details={"max_batch_size": max_batch_size},
            )
        self._endpoint = endpoint.rstrip("/")
        self._control_plane_url = (
            control_plane_url.rstrip("/") if control_plane_url else None
        )
        self._api_key = api_key
        self._index_name = index_name
        self._user_agent = user_agent
        self.max_batch_size = max_batch_size
        self.dimension = dimension

    def _headers(self, with_body: bool) -> dict[str, str]:
        headers = {
            "Api-Key": self._api_key,
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _data_request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        item_offset: int = 0,
        item_ids: Sequence[str] = (),
    ) -> WireRequest:
        return WireRequest(
            operation=operation,
            method=method,
            url=f"{self._endpoint}{path}",
            headers=self._headers(payload is not None),
            body=_encode(payload) if payload is not None else None,
            item_offset=item_offset,
            item_ids=list(item_ids),
        )

    def _control_request(
        self,
        operation: str,
        method: str,
        payload: dict[str, Any] | None = None,
    ) -> WireRequest:
        if self._control_plane_url is None:
            raise ConfigurationError(
                f"{operation} needs a control plane URL or environment",
                details={"operation": operation},
            )
        return WireRequest(
            operation=operation,
            method=method,
            url=f"{self._control_plane_url}/databases/{quote(self._index_name, safe='')}",
            headers=self._headers(payload is not None),
            body=_encode(payload) if payload is not None else None,
        )

    def _check_dimension(self, values: Sequence[float], where: dict[str, Any]) -> None:
        if self.dimension is not None and len(values) != self.dimension:
            raise ValidationError(
                f"Vector dimension {len(values)} does not match index "
                f"dimension {self.dimension}",
                details={"expected": self.dimension, "actual": len(values), **where},
            )

    def build_upsert(
        self,
        namespace: str,
        vectors: Sequence[Vector],
    ) -> list[WireRequest]:
        """Build upsert requests, split at ``max_batch_size``.

        Raises:
            ValidationError: If the batch is empty or a dimension mismatches.
        """
        if not vectors:
            raise ValidationError("Upsert batch must contain at least one vector")

        for position, vector in enumerate(vectors):
            self._check_dimension(vector.values, {"index": position, "id": vector.id})

        requests = []
        for offset, chunk in _chunks(vectors, self.max_batch_size):
            payload = {
                "vectors": [vector.to_wire() for vector in chunk],
                "namespace": namespace,
            }
            requests.append(
                self._data_request(
                    "upsert",
                    "POST",
                    "/vectors/upsert",
                    payload,
                    item_offset=offset,
                    item_ids=[vector.id for vector in chunk],
                )
            )
        return requests

    def build_query(self, request: QueryRequest, namespace: str) -> WireRequest:
        """Build a query request.

        ``namespace`` is used when the request does not name one.

        Raises:
            ValidationError: On invalid top_k, query point or dimension.
        """
        if request.top_k <= 0:
            raise ValidationError(
                "top_k must be a positive integer",
                details={"top_k": request.top_k},
            )
        if request.top_k > MAX_TOP_K:
            raise ValidationError(
                f"top_k must not exceed {MAX_TOP_K}",
                details={"top_k": request.top_k},
            )
        if (request.vector is None) == (request.id is None):
            raise ValidationError("Query needs exactly one of vector or id")
        if request.vector is not None:
            self._check_dimension(request.vector, {"field": "vector"})

        payload: dict[str, Any] = {
            "namespace": request.namespace if request.namespace is not None else namespace,
            "topK": request.top_k,
        }
        if request.vector is not None:
            payload["vector"] = request.vector
        else:
            payload["id"] = request.id
        if request.sparse_vector is not None:
            payload["sparseVector"] = request.sparse_vector.to_wire()
        wire_filter = filter_to_wire(request.filter)
        if wire_filter is not None:
            payload["filter"] = wire_filter
        payload["includeValues"] = request.include_values
        payload["includeMetadata"] = request.include_metadata

        return self._data_request("query", "POST", "/query", payload)

    def build_fetch(self, namespace: str, ids: Sequence[str]) -> WireRequest:
        """Build a fetch-by-id request.

        Raises:
            ValidationError: If no ids are given.
        """
        if not ids:
            raise ValidationError("Fetch needs at least one id")
        if any(not vector_id for vector_id in ids):
            raise ValidationError("Fetch ids must not be empty")

        query = urlencode([("ids", vector_id) for vector_id in ids] + [("namespace", namespace)])
        return self._data_request(
            "fetch",
            "GET",
            f"/vectors/fetch?{query}",
            item_ids=ids,
        )

    def build_delete(
        self,
        namespace: str,
        ids: Sequence[str] | None = None,
        filter: MetadataFilter | None = None,
        delete_all: bool = False,
    ) -> list[WireRequest]:
        """Build delete requests for exactly one deletion mode.

        Id lists are split at ``max_batch_size``.

        Raises:
            ValidationError: If zero or several modes are given.
        """
        modes = [
            name
            for name, given in (
                ("ids", ids is not None),
                ("filter", filter is not None),
                ("delete_all", delete_all),
            )
            if given
        ]
        if len(modes) != 1:
            raise ValidationError(
                "Delete needs exactly one of ids, filter or delete_all",
                details={"modes": modes},
            )

        if ids is not None:
            if not ids:
                raise ValidationError("Delete by ids needs at least one id")
            return [
                self._data_request(
                    "delete",
                    "POST",
                    "/vectors/delete",
                    {"ids": list(chunk), "namespace": namespace},
                    item_offset=offset,
                    item_ids=chunk,
                )
                for offset, chunk in _chunks(list(ids), self.max_batch_size)
            ]

        if filter is not None:
            payload = {"filter": filter_to_wire(filter), "namespace": namespace}
        else:
            payload = {"deleteAll": True, "namespace": namespace}
        return [self._data_request("delete", "POST", "/vectors/delete", payload)]

    def build_update(self, request: UpdateRequest, namespace: str) -> WireRequest:
        """Build a partial update request.

        Raises:
            ValidationError: If nothing would change or a dimension mismatches.
        """
        if (
            request.values is None
            and request.sparse_values is None
            and request.set_metadata is None
        ):
            raise ValidationError(
                "Update needs values, sparse_values or set_metadata",
                details={"id": request.id},
            )
        if request.values is not None:
            self._check_dimension(request.values, {"id": request.id})

        payload = request.to_wire()
        payload["namespace"] = (
            request.namespace if request.namespace is not None else namespace
        )
        return self._data_request(
            "update", "POST", "/vectors/update", payload, item_ids=[request.id]
        )

    def build_describe_index(self) -> WireRequest:
        return self._control_request("describe_index", "GET")

    def build_describe_index_stats(
        self,
        filter: MetadataFilter | None = None,
    ) -> WireRequest:
        payload: dict[str, Any] = {}
        wire_filter = filter_to_wire(filter)
        if wire_filter is not None:
            payload["filter"] = wire_filter
        return self._data_request(
            "describe_index_stats", "POST", "/describe_index_stats", payload
        )

    def build_list_namespaces(self) -> WireRequest:
        return self._data_request(
            "list_namespaces", "POST", "/describe_index_stats", {}
        )

    def build_configure_index(
        self,
        replicas: int | None = None,
        pod_type: str | None = None,
    ) -> WireRequest:
        """Build an index configuration request.

        Raises:
            ValidationError: If nothing would change or replicas < 1.
        """
        if replicas is None and pod_type is None:
            raise ValidationError("Configure needs replicas or pod_type")
        payload: dict[str, Any] = {}
        if replicas is not None:
            if replicas < 1:
                raise ValidationError(
                    "replicas must be at least 1",
                    details={"replicas": replicas},
                )
            payload["replicas"] = replicas
        if pod_type is not None:
            payload["pod_type"] = pod_type
        return self._control_request("configure_index", "PATCH", payload)

    def build_delete_index(self) -> WireRequest:
        """Build a request deleting the whole index. The service answers 202."""
        return self._control_request("delete_index", "DELETE")
