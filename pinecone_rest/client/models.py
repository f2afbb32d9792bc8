"""Client configuration model."""

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from pinecone_rest.builder.service import DEFAULT_MAX_BATCH_SIZE, MAX_BATCH_SIZE_LIMIT
from pinecone_rest.config import PineconeSettings, get_settings
from pinecone_rest.exceptions import ConfigurationError


def _check_url(name: str, value: str) -> None:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise ConfigurationError(
            f"{name} is not a valid URL: {e}",
            details={name: value},
        ) from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"{name} must be an absolute http(s) URL",
            details={name: value},
        )


class ClientConfig(BaseModel):
    """Immutable connection configuration of an IndexClient.

    Attributes:
        endpoint: Index host URL for data-plane requests.
        api_key: Credential sent with every request.
        index_name: Name of the index.
        namespace: Default namespace ("" is the service default).
        timeout: Default per-operation timeout in seconds.
        max_batch_size: Maximum vectors or ids per wire request.
        max_concurrent_requests: Sub-requests of one batch in flight at once.
        dimension: Index dimension hint for client-side validation.
        environment: Service environment, used to derive the controller URL.
        control_plane_url: Explicit controller URL.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(description="Index host URL")
    api_key: SecretStr = Field(description="API key")
    index_name: str = Field(description="Index name")
    namespace: str = Field(default="", description="Default namespace")
    timeout: float = Field(default=30.0, description="Timeout in seconds")
    max_batch_size: int = Field(default=DEFAULT_MAX_BATCH_SIZE)
    max_concurrent_requests: int = Field(default=4)
    dimension: int | None = Field(default=None)
    environment: str | None = Field(default=None)
    control_plane_url: str | None = Field(default=None)

    @model_validator(mode="after")
    def _validate(self) -> "ClientConfig":
        _check_url("endpoint", self.endpoint)
        if self.control_plane_url:
            _check_url("control_plane_url", self.control_plane_url)
        if not self.api_key.get_secret_value().strip():
            raise ConfigurationError("api_key must not be empty")
        if not self.index_name:
            raise ConfigurationError("index_name must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError(
                "timeout must be positive",
                details={"timeout": self.timeout},
            )
        if not 1 <= self.max_batch_size <= MAX_BATCH_SIZE_LIMIT:
            raise ConfigurationError(
                f"max_batch_size must be between 1 and {MAX_BATCH_SIZE_LIMIT}",
                details={"max_batch_size": self.max_batch_size},
            )
        if self.max_concurrent_requests < 1:
            raise ConfigurationError(
                "max_concurrent_requests must be at least 1",
                details={"max_concurrent_requests": self.max_concurrent_requests},
            )
        if self.dimension is not None and self.dimension < 1:
            raise ConfigurationError(
                "dimension must be positive",
                details={"dimension": self.dimension},
            )
        return self

    @property
    def controller_url(self) -> str | None:
        """Controller URL, derived from the environment when not set."""
        if self.control_plane_url:
            return self.control_plane_url
        if self.environment:
            return f"https://controller.{self.environment}.pinecone.io"
        return None

    @classmethod
    def from_settings(cls, settings: PineconeSettings | None = None) -> "ClientConfig":
        """Build a configuration from environment-backed settings.

        Raises:
            ConfigurationError: If the settings are incomplete or invalid.
        """
        settings = settings or get_settings().pinecone
        return cls(
            endpoint=settings.endpoint,
            api_key=settings.api_key,
            index_name=settings.index_name,
            namespace=settings.namespace,
            timeout=settings.timeout,
            max_batch_size=settings.max_batch_size,
            max_concurrent_requests=settings.max_concurrent_requests,
            dimension=settings.dimension,
            environment=settings.environment,
            control_plane_url=settings.control_plane_url,
        )
