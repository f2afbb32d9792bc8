"""Wire request model."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WireRequest(BaseModel):
    """A fully-formed HTTP request ready for a transport.

    Attributes:
        operation: Client operation that produced the request.
        method: HTTP method.
        url: Absolute URL including any query string.
        headers: Request headers.
        body: Encoded JSON body, if any.
        item_offset: Position of this request's first item in the caller's batch.
        item_ids: Ids of the batch items carried by this request, in order.
    """

    model_config = ConfigDict(frozen=True)

    operation: str = Field(description="Client operation name")
    method: str = Field(description="HTTP method")
    url: str = Field(description="Absolute request URL")
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes | None = Field(default=None)
    item_offset: int = Field(default=0)
    item_ids: list[str] = Field(default_factory=list)

    def json_body(self) -> Any:
        """Decode the body back into Python objects (order preserved)."""
        if self.body is None:
            return None
        return json.loads(self.body)
