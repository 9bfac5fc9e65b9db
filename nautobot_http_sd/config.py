"""
Loading and validation of the service configuration.

Settings come from an optional YAML/JSON file and from environment variables;
the environment wins. Pydantic describes the schema and checks the values.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from nautobot_http_sd.errors import ConfigurationError

DEFAULT_PORT = 6645
DEFAULT_QUERY_DIR = Path("graphql_queries")
DEFAULT_QUERY_SUFFIX = ".gql"

# environment variable -> config field
ENV_FIELDS: Dict[str, str] = {
    "NAUTOBOT_URL": "nautobot_url",
    "NAUTOBOT_API_TOKEN": "api_token",
    "NAUTOBOT_SD_QUERY_DIR": "query_dir",
    "NAUTOBOT_SD_HOST": "host",
    "NAUTOBOT_SD_PORT": "port",
}
REQUIRED_ENV = ("NAUTOBOT_API_TOKEN", "NAUTOBOT_URL")

_HTTP_URL = TypeAdapter(HttpUrl)


class DiscoveryConfig(BaseModel):
    """Settings for one run of the discovery service."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    nautobot_url: str = Field(..., description="Nautobot GraphQL endpoint.")
    api_token: SecretStr = Field(..., description="Nautobot API token.")
    query_dir: Path = Field(DEFAULT_QUERY_DIR, description="Directory with GraphQL query files.")
    query_suffix: str = Field(DEFAULT_QUERY_SUFFIX, min_length=1, description="Query file suffix.")
    host: str = Field("0.0.0.0", min_length=1, description="Listen address.")
    port: int = Field(DEFAULT_PORT, ge=0, le=65535, description="Listen port.")
    job_from_role: bool = Field(True, description="Use the device role as the job label.")
    request_timeout: Optional[float] = Field(
        None, gt=0, description="Total timeout per Nautobot request (seconds)."
    )
    pretty: bool = Field(True, description="Indent the served JSON.")

    @field_validator("api_token", mode="before")
    def _strip_token(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("api_token must not be empty")
        return v

    @field_validator("nautobot_url")
    def _check_url(cls, v: str) -> str:
        # validated as an http(s) URL, but posted to exactly as written
        v = v.strip()
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as exc:
            raise ValueError(f"nautobot_url is not a valid http(s) URL: {v!r}") from exc
        return v

    @property
    def endpoint(self) -> str:
        return self.nautobot_url

    @property
    def token(self) -> str:
        return self.api_token.get_secret_value()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Top level of {path} must be a mapping, got {type(data).__name__}"
        )
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Top level of {path} must be a mapping, got {type(data).__name__}"
        )
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML or JSON config file into a dict."""
    path_obj = Path(path).expanduser()
    if not path_obj.is_file():
        raise ConfigurationError(f"Config file not found: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ConfigurationError(f"Unsupported config format: {suffix}")


def load_config(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> DiscoveryConfig:
    """
    Build a validated DiscoveryConfig.

    Values are layered: config file (if any), then environment variables,
    then keyword overrides that are not None (CLI options).
    NAUTOBOT_API_TOKEN and NAUTOBOT_URL must be provided by one of the layers.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = read_config_file(path) if path is not None else {}

    for env_key, field_name in ENV_FIELDS.items():
        value = env.get(env_key)
        if value:
            data[field_name] = value

    data.update({k: v for k, v in overrides.items() if v is not None})

    for env_key in REQUIRED_ENV:
        if not data.get(ENV_FIELDS[env_key]):
            raise ConfigurationError(f"{env_key} environment variable is not set")

    try:
        return DiscoveryConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["DiscoveryConfig", "load_config", "read_config_file", "DEFAULT_PORT"]
