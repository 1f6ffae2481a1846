"""Configuration management for cmdgate.

Loads settings from a YAML configuration file with environment variable
overrides for ports and API keys. Supports .env files.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from cmdgate.executor.denylist import DEFAULT_DENYLIST

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/cmdgate.yaml")


class ExecutorConfig(BaseModel):
    timeout: float = Field(default=30.0, gt=0, description="Wall-clock budget per command (s)")
    working_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    denylist: list[str] = Field(default_factory=lambda: sorted(DEFAULT_DENYLIST))

    @field_validator("working_dir")
    @classmethod
    def _not_root(cls, value: Path) -> Path:
        if value.resolve() == Path(value.anchor or "/").resolve():
            raise ValueError("working_dir must not be the filesystem root")
        return value


class GatewayConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8081, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    shutdown_timeout: int = Field(default=0, ge=0, description="Graceful drain on SIGTERM (s)")


class PoolConfig(BaseModel):
    prefix: str = Field(default="/api", description="Path prefix routed to this pool")
    instances: list[str] = Field(
        default_factory=lambda: ["http://127.0.0.1:8080", "http://127.0.0.1:8082"],
        min_length=1,
        description="Base URL of each instance; the list index is the instance id",
    )
    forward_timeout: float = Field(default=30.0, gt=0)

    @field_validator("prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = "/" + value.strip("/")
        if value == "/":
            raise ValueError("pool prefix must not be empty")
        return value


class RouterConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8787, ge=1, le=65535)
    pools: dict[str, PoolConfig] = Field(
        default_factory=lambda: {"backend": PoolConfig()},
    )
    shutdown_timeout: int = Field(default=0, ge=0)


class ServicesConfig(BaseModel):
    kv_path: Path | None = Field(default=None, description="YAML mapping served by /kv")
    kv_default_key: str = Field(default="demo-key")
    blob_root: Path = Field(default=Path("blobs"))
    image_key: str = Field(default="ai-generated/1746948849155-zjng9a.jpg")
    image_format: Literal["avif", "webp", "jpeg", "png"] = Field(default="webp")
    image_fit: Literal["cover", "contain", "scale-down", "fill"] = Field(default="cover")
    secondary_url: str | None = Field(default=None)
    secondary_prefix: str = Field(default="/workflow")


class InferenceConfig(BaseModel):
    provider: Literal["openai", "anthropic"] | None = Field(default=None)
    model: str = Field(default="gpt-4o-mini")
    base_url: str | None = Field(default=None)
    max_tokens: int = Field(default=512, gt=0)
    default_prompt: str = Field(default="What is the origin of the phrase Hello, World?")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the cmdgate services.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "CMDGATE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # API Keys
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    anthropic_api_key: SecretStr = Field(default=SecretStr(""))

    # Configuration sections
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: PORT and API-key env vars > YAML file > CMDGATE_ env vars and
    .env file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars."""
    port = os.environ.get("PORT", "")
    openai_key = os.environ.get("OPENAI_API_KEY", "")
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY", "")

    if port:
        yaml_data.setdefault("gateway", {})["port"] = int(port)

    if openai_key and not yaml_data.get("openai_api_key"):
        yaml_data["openai_api_key"] = openai_key

    if anthropic_key and not yaml_data.get("anthropic_api_key"):
        yaml_data["anthropic_api_key"] = anthropic_key
