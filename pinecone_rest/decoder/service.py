"""Response decoder and error mapper.

Turns raw responses into typed results, or raises the error kind matching
the status. Decoding is synchronous and never touches the network.
"""

import json
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

import pydantic

from pinecone_rest.builder.models import WireRequest
from pinecone_rest.exceptions import (
    AuthError,
    ClientError,
    DecodeError,
    ItemOutcome,
    NotFound,
    PineconeClientError,
    RateLimited,
    ServerError,
    ServerValidationError,
    ValidationError,
)
from pinecone_rest.logging_config import get_logger
from pinecone_rest.payload.models import (
    FetchResult,
    IndexDescriptor,
    IndexStats,
    NamespaceSummary,
    QueryResult,
    UpsertResult,
)
from pinecone_rest.transport.base import RawResponse

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

# Longest body excerpt kept on errors.
_BODY_EXCERPT = 512


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds or as an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max((when - datetime.now(UTC)).total_seconds(), 0.0)


def _service_message(response: RawResponse) -> str:
    text = response.text().strip()
    try:
        data = json.loads(text)
    except ValueError:
        return text[:_BODY_EXCERPT]
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and "message" in error:
            return str(error["message"])
        if "message" in data:
            return str(data["message"])
    return text[:_BODY_EXCERPT]


class ResponseDecoder:
    """Maps raw responses to results or typed errors."""

    def raise_for_status(self, request: WireRequest, response: RawResponse) -> None:
        """Raise the error kind matching a non-2xx status.

        Raises:
            AuthError: 401 or 403.
            NotFound: 404.
            ServerValidationError: 400.
            RateLimited: 429.
            ClientError: Any other 4xx.
            ServerError: 5xx or any other unexpected status.
        """
        status = response.status_code
        if 200 <= status < 300:
            return

        message = _service_message(response)
        details = {"operation": request.operation, "url": request.url}
        logger.error(
            f"{request.operation} failed with {status}: {message}",
            extra={"status": status, "url": request.url},
        )

        if status in (401, 403):
            raise AuthError(
                message or "Authentication failed",
                status_code=status,
                details=details,
            )
        if status == 404:
            raise NotFound(message or "Resource not found", details=details)
        if status == 400:
            raise ServerValidationError(message or "Request rejected", details=details)
        if status == 429:
            raise RateLimited(
                message or "Rate limit exceeded",
                retry_after=parse_retry_after(response.headers.get("retry-after")),
                details=details,
            )
        if 400 <= status < 500:
            raise ClientError(
                message or f"Service returned {status}",
                status_code=status,
                details=details,
            )
        raise ServerError(
            message or f"Service returned {status}",
            status_code=status,
            body=response.text()[:_BODY_EXCERPT],
            details=details,
        )

    def _json(self, request: WireRequest, response: RawResponse) -> Any:
        self.raise_for_status(request, response)
        if not response.body.strip():
            return {}
        try:
            return json.loads(response.body)
        except ValueError as e:
            raise DecodeError(
                f"Invalid JSON in {request.operation} response: {e}",
                status_code=response.status_code,
                details={"body": response.text()[:_BODY_EXCERPT]},
            ) from e

    def _model(
        self,
        model: type[ModelT],
        data: Any,
        request: WireRequest,
        response: RawResponse,
    ) -> ModelT:
        try:
            return model.model_validate(data)
        except (pydantic.ValidationError, ValidationError) as e:
            raise DecodeError(
                f"Unexpected {request.operation} response: {e}",
                status_code=response.status_code,
                details={"body": response.text()[:_BODY_EXCERPT]},
            ) from e

    def decode_upsert(self, request: WireRequest, response: RawResponse) -> UpsertResult:
        return self._model(UpsertResult, self._json(request, response), request, response)

    def decode_query(self, request: WireRequest, response: RawResponse) -> QueryResult:
        return self._model(QueryResult, self._json(request, response), request, response)

    def decode_fetch(self, request: WireRequest, response: RawResponse) -> FetchResult:
        return self._model(FetchResult, self._json(request, response), request, response)

    def decode_empty(self, request: WireRequest, response: RawResponse) -> None:
        """Check an operation whose success body carries no data."""
        self._json(request, response)

    def decode_index_stats(
        self,
        request: WireRequest,
        response: RawResponse,
    ) -> IndexStats:
        return self._model(IndexStats, self._json(request, response), request, response)

    def decode_list_namespaces(
        self,
        request: WireRequest,
        response: RawResponse,
    ) -> list[NamespaceSummary]:
        return list(self.decode_index_stats(request, response).namespaces.values())

    def decode_describe_index(
        self,
        request: WireRequest,
        response: RawResponse,
    ) -> IndexDescriptor:
        data = self._json(request, response)
        if not isinstance(data, dict) or not isinstance(data.get("database"), dict):
            raise DecodeError(
                "describe_index response has no database section",
                status_code=response.status_code,
                details={"body": response.text()[:_BODY_EXCERPT]},
            )
        flattened = {**data["database"], "status": data.get("status") or {}}
        return self._model(IndexDescriptor, flattened, request, response)

    def decode_text(self, request: WireRequest, response: RawResponse) -> str:
        self.raise_for_status(request, response)
        return response.text()

    def item_outcomes(
        self,
        request: WireRequest,
        response: RawResponse,
    ) -> list[ItemOutcome]:
        """Per-item outcomes of a successful batch sub-request.

        The service may list rejected items as ``{"errors": [{"index": i,
        "message": ...}]}`` with indexes relative to the sub-request. Every
        other item counts as accepted.
        """
        data = self._json(request, response)
        rejected: dict[int, PineconeClientError] = {}
        errors = data.get("errors") if isinstance(data, dict) else None
        for entry in errors or []:
            try:
                position = int(entry["index"])
            except (KeyError, TypeError, ValueError) as e:
                raise DecodeError(
                    f"Malformed item error in {request.operation} response",
                    status_code=response.status_code,
                    details={"entry": repr(entry)},
                ) from e
            if not 0 <= position < len(request.item_ids):
                raise DecodeError(
                    f"Item error index {position} outside the request",
                    status_code=response.status_code,
                    details={"items": len(request.item_ids)},
                )
            rejected[position] = ServerValidationError(
                str(entry.get("message", "Item rejected")),
                details={"id": request.item_ids[position]},
            )

        return [
            ItemOutcome(
                index=request.item_offset + position,
                id=item_id,
                error=rejected.get(position),
            )
            for position, item_id in enumerate(request.item_ids)
        ]
