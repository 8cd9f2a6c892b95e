"""Configuration management for the JSON sink reporter."""

import logging
import socket
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PositiveFloat,
    ValidationError,
    field_validator,
)

logger = logging.getLogger(__name__)


# Config file paths
CONFIG_DIR = Path("/etc/jsonsink")
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_SINK_URL = "http://localhost:8000"
AUTO_HOSTNAME = "auto"


class RequestMethod(str, Enum):
    """HTTP method used to forward data to the sink."""

    PUT = "PUT"
    POST = "POST"


class ReporterConfig(BaseModel):
    """Options handed to the reporter at initialization."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sink_url: str = Field(
        default=DEFAULT_SINK_URL,
        validation_alias=AliasChoices("sink_url", "json_sink_url"),
    )
    request_type: RequestMethod = Field(
        default=RequestMethod.PUT,
        validation_alias=AliasChoices("request_type", "json_http_request_type"),
    )
    hostname: str = AUTO_HOSTNAME
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: Optional[PositiveFloat] = None

    @field_validator("request_type", mode="before")
    @classmethod
    def coerce_request_type(cls, v: Any) -> RequestMethod:
        """Map POST to POST and everything else to PUT."""
        if isinstance(v, RequestMethod):
            return v
        if isinstance(v, str) and v.strip().upper() == RequestMethod.POST.value:
            return RequestMethod.POST
        return RequestMethod.PUT


class ReporterState(BaseModel):
    """Resolved reporter state. Built once by resolve_state().

    Headers are held as a tuple of (name, value) pairs so the state stays
    read-only all the way down.
    """

    model_config = ConfigDict(frozen=True)

    sink_url: str
    request_method: RequestMethod
    hostname: str
    headers: tuple[tuple[str, str], ...] = ()
    timeout: Optional[float] = None

    @field_validator("headers", mode="before")
    @classmethod
    def freeze_headers(cls, v: Any) -> Any:
        """Accept a mapping of headers."""
        if isinstance(v, Mapping):
            return tuple(v.items())
        return v


def get_hostname() -> str:
    """Get the system hostname.

    Returns:
        System hostname
    """
    try:
        return socket.gethostname()
    except Exception:
        return "unknown"


def resolve_hostname(hostname: str) -> str:
    """Resolve the literal "auto" to the local hostname."""
    if hostname == AUTO_HOSTNAME:
        return get_hostname()
    return hostname


def resolve_state(config: ReporterConfig) -> ReporterState:
    """Build the reporter state from its options.

    Args:
        config: Reporter options

    Returns:
        ReporterState with the hostname resolved
    """
    return ReporterState(
        sink_url=config.sink_url,
        request_method=config.request_type,
        hostname=resolve_hostname(config.hostname),
        headers=config.headers,
        timeout=config.timeout,
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        return upper_v


class Config(BaseModel):
    """Main configuration model."""

    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_config() -> Config:
    """Get default configuration."""
    return Config()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to /etc/jsonsink/config.yaml

    Returns:
        Config object
    """
    if config_path is None:
        config_path = CONFIG_FILE

    if not config_path.exists():
        logger.debug(f"Config file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML in config file {config_path}: {e}. Using defaults.")
        return get_default_config()
    except ValidationError as e:
        logger.warning(f"Invalid configuration in {config_path}: {e}. Using defaults.")
        return get_default_config()
    except PermissionError:
        logger.warning(f"Permission denied reading config file {config_path}. Using defaults.")
        return get_default_config()
    except Exception as e:
        logger.warning(f"Error loading config from {config_path}: {e}. Using defaults.")
        return get_default_config()


def save_config(config: Config, config_path: Optional[Path] = None) -> None:
    """Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to config file. Defaults to /etc/jsonsink/config.yaml
    """
    if config_path is None:
        config_path = CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False)


def set_config_value(key: str, value: str, config_path: Optional[Path] = None) -> Config:
    """Set a configuration value.

    Args:
        key: Configuration key (e.g., 'reporter.sink_url', 'logging.level')
        value: Value to set
        config_path: Path to config file

    Returns:
        Updated Config object
    """
    config = load_config(config_path)
    data = config.model_dump(mode="json")

    if key == "reporter.sink_url":
        data["reporter"]["sink_url"] = value
    elif key == "reporter.request_type":
        data["reporter"]["request_type"] = value
    elif key == "reporter.hostname":
        data["reporter"]["hostname"] = value
    elif key == "reporter.timeout":
        data["reporter"]["timeout"] = float(value) if value else None
    elif key == "logging.level":
        data["logging"]["level"] = value
    elif key == "logging.file":
        data["logging"]["file"] = value if value else None
    else:
        raise ValueError(f"Unknown configuration key: {key}")

    # Revalidate so bad levels or timeouts never reach the file
    try:
        config = Config(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid value for {key}: {value}") from e

    save_config(config, config_path)
    return config
