from os import environ
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StorageBackend = Literal["neo4j", "memory"]


def _get_int_env(key: str, default: int) -> int:
    value = environ.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}")


def _get_list_env(key: str, default: list[str]) -> list[str]:
    value = environ.get(key)
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime configuration for the payment block service.

    Values are read from the environment once at startup and passed
    explicitly to whatever needs them.

    Attributes:
        neo4j_uri: URI of the Neo4j server
        neo4j_user: Neo4j user name
        neo4j_password: Neo4j password
        neo4j_database: Neo4j database name, empty for the server default
        storage_backend: Which block store to run against
        environment: "production" for JSON logs, anything else for console logs
        log_level: Minimum log level name
        cors_allow_origins: Origins allowed to make cross-origin requests
        host: Address to bind the HTTP server to
        port: Port to bind the HTTP server to
    """

    model_config = ConfigDict(frozen=True)

    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = ""
    storage_backend: StorageBackend = "neo4j"
    environment: str = "production"
    log_level: str = "INFO"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Settings populated from the environment, with defaults for
            anything unset

        Raises:
            ValueError: If a variable holds an invalid value
        """
        return cls(
            neo4j_uri=environ.get("NEO4J_URI", "bolt://localhost:7687"),
            neo4j_user=environ.get("NEO4J_USER", "neo4j"),
            neo4j_password=environ.get("NEO4J_PASSWORD", ""),
            neo4j_database=environ.get("NEO4J_DATABASE", ""),
            storage_backend=environ.get("PAYMENT_BLOCK_STORAGE", "neo4j").lower(),
            environment=environ.get("APP_ENVIRONMENT", "production"),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            cors_allow_origins=_get_list_env("CORS_ALLOW_ORIGINS", ["*"]),
            host=environ.get("HOST", "0.0.0.0"),
            port=_get_int_env("PORT", 8080),
        )
