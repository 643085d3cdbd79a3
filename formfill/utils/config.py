"""Configuration management for the form-fill assistant.

Loads and validates YAML configuration with defaults for the vision-model
gateway and the upload surface. Configuration is read once at startup and
is immutable afterwards.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when required runtime configuration is missing."""


class GatewayConfig(BaseModel):
    """Connection settings for the vision-model chat-completion gateway."""

    model_config = ConfigDict(frozen=True)

    url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    model: str = "google/gemini-2.5-flash"
    api_key_env: str = "LOVABLE_API_KEY"
    timeout_seconds: float = 60.0


class UploadConfig(BaseModel):
    """Accepted upload formats."""

    model_config = ConfigDict(frozen=True)

    allowed_content_types: tuple[str, ...] = (
        "application/pdf",
        "image/jpeg",
        "image/png",
    )


class AppConfig(BaseModel):
    """Top-level application configuration."""

    model_config = ConfigDict(frozen=True)

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()


def resolve_api_key(config: GatewayConfig) -> str:
    """Read the gateway API key from the configured environment variable.

    Raises:
        ConfigurationError: If the variable is unset or empty.
    """
    api_key = os.environ.get(config.api_key_env, "").strip()
    if not api_key:
        raise ConfigurationError(f"{config.api_key_env} is not configured")
    return api_key
