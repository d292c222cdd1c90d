from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


class LubeLoggerConfig(BaseModel):
    api_url: str
    authorization: str
    timeout_seconds: float = 30

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("api_url must be non-empty")
        return v

    @field_validator("authorization")
    @classmethod
    def _authorization_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("authorization must be non-empty")
        return v


class RoadTripConfig(BaseModel):
    csv_path: str = "./testdata/CSV"


class SyncConfig(BaseModel):
    skip_duplicate_keys: bool = False


class AppConfig(BaseModel):
    lubelogger: LubeLoggerConfig
    roadtrip: RoadTripConfig = Field(default_factory=RoadTripConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {config_path}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping: {config_path}")
    return data


def load_config(path: str | Path, environ: Optional[Dict[str, str]] = None) -> AppConfig:
    """
    Load YAML config, then apply environment overrides.

    API_URI and AUTHORIZATION take precedence over lubelogger.api_url and
    lubelogger.authorization. The file may be absent only when both are set.
    """
    env = os.environ if environ is None else environ
    config_path = Path(path)

    api_uri = (env.get("API_URI") or "").strip()
    authorization = (env.get("AUTHORIZATION") or "").strip()

    if config_path.exists():
        data = _read_yaml(config_path)
    elif api_uri and authorization:
        data = {}
    else:
        raise ConfigError(
            f"Config file not found at {config_path} and API_URI/AUTHORIZATION are not set"
        )

    section = data.get("lubelogger") or {}
    if not isinstance(section, dict):
        raise ConfigError("Section lubelogger must be a mapping")
    section = dict(section)
    if api_uri:
        section["api_url"] = api_uri
    if authorization:
        section["authorization"] = authorization
    if not section.get("api_url") or not section.get("authorization"):
        raise ConfigError("Missing required keys: lubelogger.api_url and lubelogger.authorization")
    data = {**data, "lubelogger": section}

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e
