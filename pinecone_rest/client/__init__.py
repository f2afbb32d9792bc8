"""Client facade module."""

from pinecone_rest.client.models import ClientConfig
from pinecone_rest.client.service import IndexClient

__all__ = [
    "ClientConfig",
    "IndexClient",
]
