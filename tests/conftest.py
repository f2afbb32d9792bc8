"""Pytest configuration and shared fixtures."""

import asyncio
import json
import math
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.client import ClientConfig, IndexClient
from pinecone_rest.transport.base import RawResponse, Transport


def _score(metric: str, a: list[float], b: list[float]) -> float:
    if metric == "euclidean":
        return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))
    dot = sum(x * y for x, y in zip(a, b))
    if metric == "dotproduct":
        return dot
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeIndexService(Transport):
    """In-memory index speaking the service's wire protocol.

    Vectors with the wrong dimension are rejected per item, the way a
    service reporting item errors would.
    """

    def __init__(self, dimension: int = 3, metric: str = "cosine") -> None:
        self.dimension = dimension
        self.metric = metric
        self.namespaces: dict[str, dict[str, dict[str, Any]]] = {}
        self.requests: list[WireRequest] = []
        self.closed = False
        self.deleted = False

    def _reply(self, status: int, payload: Any) -> RawResponse:
        return RawResponse(
            status_code=status,
            headers={"content-type": "application/json"},
            body=json.dumps(payload).encode(),
        )

    async def _send(self, request: WireRequest, timeout: float | None) -> RawResponse:
        self.requests.append(request)
        await asyncio.sleep(0)
        url = urlsplit(request.url)
        body = request.json_body() or {}

        if url.path == "/vectors/upsert":
            return self._upsert(body)
        if url.path == "/query":
            return self._query(body)
        if url.path == "/vectors/fetch":
            return self._fetch(parse_qs(url.query, keep_blank_values=True))
        if url.path == "/vectors/delete":
            return self._delete(body)
        if url.path == "/describe_index_stats":
            return self._stats()
        if url.path.startswith("/databases/") and request.method == "GET":
            return self._reply(
                200,
                {
                    "database": {
                        "name": url.path.rsplit("/", 1)[-1],
                        "dimension": self.dimension,
                        "metric": self.metric,
                        "pods": 1,
                        "replicas": 1,
                        "shards": 1,
                        "pod_type": "p1.x1",
                    },
                    "status": {"ready": True, "state": "Ready"},
                },
            )
        if url.path.startswith("/databases/") and request.method == "DELETE":
            if self.deleted:
                return self._reply(404, {"code": 5, "message": "Index not found"})
            self.deleted = True
            self.namespaces.clear()
            return RawResponse(
                status_code=202,
                headers={"content-type": "text/plain"},
                body=b"Index deletion accepted",
            )
        return self._reply(404, {"code": 5, "message": f"Unknown route {url.path}"})

    def _upsert(self, body: dict[str, Any]) -> RawResponse:
        store = self.namespaces.setdefault(body.get("namespace", ""), {})
        errors = []
        for position, vector in enumerate(body["vectors"]):
            if len(vector["values"]) != self.dimension:
                errors.append(
                    {
                        "index": position,
                        "message": f"Vector dimension {len(vector['values'])} "
                        f"does not match the dimension of the index {self.dimension}",
                    }
                )
                continue
            store[vector["id"]] = vector
        payload: dict[str, Any] = {"upsertedCount": len(body["vectors"]) - len(errors)}
        if errors:
            payload["errors"] = errors
        return self._reply(200, payload)

    def _query(self, body: dict[str, Any]) -> RawResponse:
        namespace = body.get("namespace", "")
        store = self.namespaces.get(namespace, {})
        if "vector" in body:
            query = body["vector"]
        else:
            query = store[body["id"]]["values"]
        scored = [
            (_score(self.metric, query, vector["values"]), vector)
            for vector in store.values()
        ]
        scored.sort(key=lambda item: item[0], reverse=self.metric != "euclidean")
        matches = []
        for score, vector in scored[: body["topK"]]:
            match: dict[str, Any] = {"id": vector["id"], "score": score}
            if body.get("includeValues"):
                match["values"] = vector["values"]
            if body.get("includeMetadata") and "metadata" in vector:
                match["metadata"] = vector["metadata"]
            matches.append(match)
        return self._reply(200, {"matches": matches, "namespace": namespace})

    def _fetch(self, query: dict[str, list[str]]) -> RawResponse:
        namespace = query.get("namespace", [""])[0]
        store = self.namespaces.get(namespace, {})
        vectors = {i: store[i] for i in query.get("ids", []) if i in store}
        return self._reply(200, {"vectors": vectors, "namespace": namespace})

    def _delete(self, body: dict[str, Any]) -> RawResponse:
        store = self.namespaces.get(body.get("namespace", ""), {})
        if body.get("deleteAll"):
            store.clear()
        for vector_id in body.get("ids", []):
            store.pop(vector_id, None)
        return self._reply(200, {})

    def _stats(self) -> RawResponse:
        namespaces = {
            name: {"vectorCount": len(store)}
            for name, store in self.namespaces.items()
        }
        return self._reply(
            200,
            {
                "namespaces": namespaces,
                "dimension": self.dimension,
                "indexFullness": 0.0,
                "totalVectorCount": sum(len(s) for s in self.namespaces.values()),
            },
        )

    async def close(self) -> None:
        self.closed = True


class StubTransport(Transport):
    """Transport replying from a scripted function of the request."""

    def __init__(self, reply: Any) -> None:
        self.reply = reply
        self.requests: list[WireRequest] = []

    async def _send(self, request: WireRequest, timeout: float | None) -> RawResponse:
        self.requests.append(request)
        result = self.reply(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    async def close(self) -> None:
        return None


def make_config(**overrides: Any) -> ClientConfig:
    values: dict[str, Any] = {
        "endpoint": "https://idx-proj.svc.test-env.pinecone.io",
        "api_key": "test-key",
        "index_name": "idx",
        "environment": "test-env",
    }
    values.update(overrides)
    return ClientConfig(**values)


@pytest.fixture
def service() -> FakeIndexService:
    """Fresh in-memory index with dimension 3 and cosine metric."""
    return FakeIndexService()


@pytest.fixture
def client(service: FakeIndexService) -> IndexClient:
    """Client bound to the in-memory index, default namespace "ns1"."""
    return IndexClient(make_config(namespace="ns1"), transport=service)
