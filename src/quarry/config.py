from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "Quarry"
    env: str = "development"
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class StorageConfig(BaseModel):
    """Where the relational store and the full-text index live."""

    data_root: str = "./data"
    # Relative to data_root; holds both the .storage database and the index files
    index_subdir: str = "tntsearch/indexes"
    index_name: str = "quarry.index"
    directory_mode: int = 0o775
    echo_sql: bool = False


class SearchConfig(BaseModel):
    """Query-time behaviour."""

    # Extra hits requested from the engine so access filtering can still fill a page
    overfetch: int = 1
    excerpt_margin: int = 20
    # Documents carrying a mimetype outside this list are stored with empty content
    indexed_mimetypes: List[str] = ["text/markdown"]


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="QUARRY_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    storage: StorageConfig = StorageConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
