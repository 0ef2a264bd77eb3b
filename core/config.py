"""Configuration models and loading."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import ConfigurationError

_FALSE_VALUES = {"0", "false", "no", "off"}


class ServerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    dashboard: bool = True


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=30.0, gt=0)


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    server: ServerSettings = Field(default_factory=ServerSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build the configuration from environment variables."""
    env = os.environ if environ is None else environ

    server: dict[str, object] = {}
    if env.get("HOST"):
        server["host"] = env["HOST"]
    if env.get("PORT"):
        server["port"] = env["PORT"]
    if env.get("DASHBOARD"):
        server["dashboard"] = env["DASHBOARD"].strip().lower() not in _FALSE_VALUES

    upstream: dict[str, object] = {}
    if env.get("UPSTREAM_TIMEOUT"):
        upstream["timeout"] = env["UPSTREAM_TIMEOUT"]

    try:
        return Config.model_validate({"server": server, "upstream": upstream})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e
