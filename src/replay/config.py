"""
Replay engine configuration using Pydantic Settings.

This module provides configuration management for the replay engine,
allowing environment-based configuration with type validation and defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "market-replay"


class FetchConfig(BaseSettings):
    """Archive access configuration."""

    model_config = SettingsConfigDict(env_prefix="MARKET_REPLAY_FETCH_")

    # Archive settings
    api_url: str = Field(
        default="http://127.0.0.1:8080/v1",
        description="Base URL of the archive serving segments and exchange details",
    )
    api_key: str = Field(default="", description="Archive API key")

    timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Timeout for a single segment download in seconds",
    )


class CacheConfig(BaseSettings):
    """Local segment cache configuration."""

    model_config = SettingsConfigDict(env_prefix="MARKET_REPLAY_CACHE_")

    cache_dir: Path = Field(
        default_factory=_default_cache_dir,
        description="Directory holding cached compressed segments",
    )


class StreamConfig(BaseSettings):
    """Replay stream configuration."""

    model_config = SettingsConfigDict(env_prefix="MARKET_REPLAY_STREAM_")

    prefetch_segments: bool = Field(
        default=True,
        description="Fetch the next day's segment while the current one is consumed",
    )
    partition_by_channel: bool = Field(
        default=False,
        description="Archive stores one segment per channel instead of one per day",
    )


class ReplayConfig(BaseSettings):
    """Root configuration combining all sub-configs."""

    model_config = SettingsConfigDict(env_prefix="MARKET_REPLAY_")

    # Sub-configurations
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)

    # Global settings
    debug: bool = False
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    @classmethod
    def from_env(cls) -> "ReplayConfig":
        """
        Load configuration from environment variables.

        Returns:
            Configured ReplayConfig instance

        """
        return cls(
            fetch=FetchConfig(),
            cache=CacheConfig(),
            stream=StreamConfig(),
        )
