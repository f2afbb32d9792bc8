"""Response decoder module."""

from pinecone_rest.decoder.service import ResponseDecoder, parse_retry_after

__all__ = [
    "ResponseDecoder",
    "parse_retry_after",
]
