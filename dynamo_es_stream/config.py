"""
Process-level configuration for dynamo_es_stream.

Uses pydantic-settings for environment variable management. Per-handler
behaviour (index naming, hooks, retries) lives in ``options``; this module
only covers what a deployment sets through the Lambda environment.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StreamSettings(BaseSettings):
    """Environment configuration for the stream indexer."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMO_ES_STREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Log level for the dynamo_es_stream logger",
    )

    # Elasticsearch connection used when options carry no connection details
    elasticsearch_hosts: list[str] = Field(
        default_factory=lambda: ["http://localhost:9200"],
        description="Elasticsearch hosts for the default client",
    )
    request_timeout: int = Field(
        default=30,
        description="Elasticsearch request timeout in seconds",
        ge=1,
        le=900,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the level name against the logging module."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> StreamSettings:
    """Get cached settings instance."""
    return StreamSettings()
