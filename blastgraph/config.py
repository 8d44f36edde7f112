from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Inventory store
    INVENTORY_BACKEND: Literal["memory", "neo4j"] = "memory"
    INVENTORY_FILE: str = Field(default="", description="JSON inventory loaded by the memory backend")

    # Neo4j
    NEO4J_URI: str = "bolt://neo4j:7687"
    NEO4J_USER: str = "neo4j"
    NEO4J_PASSWORD: str = "blastgraph_dev"

    # Subgraph resolution. Changing these changes previously shared graphs.
    GRAPH_NODE_LIMIT: int = Field(default=300, ge=1)
    GRAPH_MIN_HOPS: int = Field(default=1, ge=0)
    GRAPH_MAX_HOPS: int = Field(default=5, ge=1)

    # Server response cache
    RESPONSE_CACHE_TTL_SECONDS: float = 30.0
    RESPONSE_CACHE_SWEEP_THRESHOLD: int = 100

    # Client
    BLASTGRAPH_API_URL: str = "http://localhost:8000"
    LAYOUT_CACHE_SIZE: int = Field(default=20, ge=1)
    GRAPH_DEBOUNCE_SECONDS: float = 0.3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
