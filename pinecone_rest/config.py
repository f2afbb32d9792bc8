"""Client configuration using Pydantic Settings.

Configuration may be loaded from environment variables or a .env file.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class PineconeSettings(BaseSettings):
    """Vector index connection configuration."""

    model_config = SettingsConfigDict(env_prefix="PINECONE_")

    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key sent in the Api-Key header",
    )
    environment: str | None = Field(
        default=None,
        description="Service environment, e.g. us-east1-gcp",
    )
    index_name: str = Field(
        default="",
        description="Name of the target index",
    )
    endpoint: str = Field(
        default="",
        description="Index host URL for data-plane requests",
    )
    control_plane_url: str | None = Field(
        default=None,
        description="Controller URL (derived from environment if unset)",
    )
    namespace: str = Field(
        default="",
        description="Default namespace (empty string is the default namespace)",
    )
    timeout: float = Field(
        default=30.0,
        description="Per-operation timeout in seconds",
    )
    max_batch_size: int = Field(
        default=100,
        description="Maximum vectors or ids per wire request",
    )
    max_concurrent_requests: int = Field(
        default=4,
        description="Sub-requests of one batch allowed in flight at once",
    )
    dimension: int | None = Field(
        default=None,
        description="Index dimension hint for client-side validation",
    )


class Settings(BaseSettings):
    """Main settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested settings
    pinecone: PineconeSettings = Field(default_factory=PineconeSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
