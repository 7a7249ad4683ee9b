"""Configuration loading, validation, and access."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from fundscope.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Ranges accepted by the Yahoo Finance chart endpoint
_YAHOO_RANGES = {"1mo", "3mo", "6mo", "1y", "2y", "5y", "10y", "ytd", "max"}


class YahooConfig(BaseModel):
    """Yahoo Finance price source configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://query1.finance.yahoo.com"
    range: str = "6mo"
    interval: str = "1d"
    request_timeout: float = 15.0
    rate_limit: int = 5
    max_retries: int = 3
    retry_backoff: float = 0.5

    @field_validator("range")
    @classmethod
    def range_supported(cls, v: str) -> str:
        if v not in _YAHOO_RANGES:
            raise ValueError(
                f"range must be one of {sorted(_YAHOO_RANGES)}, got {v!r}"
            )
        return v

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_in_bounds(cls, v: int) -> int:
        if v < 1 or v > 50:
            raise ValueError("rate_limit must be between 1 and 50 requests/second")
        return v

    @field_validator("max_retries")
    @classmethod
    def max_retries_in_bounds(cls, v: int) -> int:
        if v < 0 or v > 10:
            raise ValueError("max_retries must be between 0 and 10")
        return v

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v


class ISharesConfig(BaseModel):
    """iShares fund provider configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    base_url: str = "https://www.ishares.com"
    list_path: str = "/us/products/etf-investments"
    holdings_path: str = "/1467271812596.ajax?fileType=csv&dataType=fund"
    request_timeout: float = 30.0

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v


class CacheConfig(BaseModel):
    """Aggregation cache behaviour."""

    model_config = ConfigDict(frozen=True)

    single_flight: bool = True
    concurrent_fanout: bool = True
    max_concurrent_fetches: int = 8

    @field_validator("max_concurrent_fetches")
    @classmethod
    def max_concurrent_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_fetches must be >= 1")
        return v


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]


class LoggingConfig(BaseModel):
    """Root logger configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @field_validator("level")
    @classmethod
    def level_known(cls, v: str) -> str:
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return name


class FundscopeConfig(BaseModel):
    """Root configuration for the entire fundscope system."""

    model_config = ConfigDict(frozen=True)

    yahoo: YahooConfig = YahooConfig()
    ishares: ISharesConfig = ISharesConfig()
    cache: CacheConfig = CacheConfig()
    api: APIConfig = APIConfig()
    logging: LoggingConfig = LoggingConfig()


CONFIG_ENV_VAR = "FUNDSCOPE_CONFIG"
DEFAULT_CONFIG_FILE = "fundscope.yml"


def load_config(
    config_path: str | None = None,
    env_prefix: str = "FUNDSCOPE_",
) -> FundscopeConfig:
    """Load configuration from environment + YAML file + defaults.

    The YAML file is ``config_path`` if given, else ``$FUNDSCOPE_CONFIG``,
    else ``./fundscope.yml`` when it exists. ``FUNDSCOPE_<SECTION>__<FIELD>``
    variables then override single fields:

        FUNDSCOPE_CACHE__SINGLE_FLIGHT=false  ->  cache.single_flight = False

    Raises:
        ConfigError: Missing or unreadable file, or values that fail validation.
    """
    path = _config_file(config_path)
    data = _read_yaml(path) if path is not None else {}

    for section, field, value in _env_overrides(env_prefix):
        current = data.get(section)
        data[section] = {**current, field: value} if isinstance(current, dict) else {field: value}

    try:
        return FundscopeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e}",
            context={"source": str(path) if path else "environment"},
        ) from e


def _config_file(explicit: str | None) -> Path | None:
    if explicit is not None:
        source, value = "config_path", explicit
    elif os.environ.get(CONFIG_ENV_VAR):
        source, value = CONFIG_ENV_VAR, os.environ[CONFIG_ENV_VAR]
    else:
        default = Path(DEFAULT_CONFIG_FILE)
        return default if default.exists() else None

    path = Path(value)
    if not path.exists():
        raise ConfigError(
            f"Config file from {source} not found: {value}",
            context={"field": source, "value": value},
        )
    return path


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Failed to parse YAML config {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _env_overrides(prefix: str) -> list[tuple[str, str, Any]]:
    """(section, field, value) for every ``<prefix><SECTION>__<FIELD>`` variable.

    Values are read as YAML scalars, so ``true``, ``8`` and ``0.5`` arrive
    typed and anything else stays a string.
    """
    overrides = []
    for key, raw in os.environ.items():
        if not key.startswith(prefix) or key == CONFIG_ENV_VAR:
            continue
        section, sep, field = key[len(prefix):].lower().partition("__")
        if not sep or not field:
            logger.debug("Ignoring %s: expected %s<SECTION>__<FIELD>", key, prefix)
            continue
        overrides.append((section, field, _parse_env_value(raw)))
    return overrides


def _parse_env_value(raw: str) -> Any:
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return raw if value is None or isinstance(value, (dict, list)) else value
