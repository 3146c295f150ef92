"""
Configuration management and loading.

Handles application settings from a YAML file and environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from filltrip.core.matcher import MatcherConfig
from filltrip.sdk.routing_client import MAPBOX_DIRECTIONS_URL


DEFAULT_API_BASE = "http://127.0.0.1/filltrip-db"
DEFAULT_CONFIG_PATH = "filltrip.yaml"

ENV_API_BASE = "FILLTRIP_API_BASE"
ENV_MAPBOX_TOKEN = "FILLTRIP_MAPBOX_TOKEN"
ENV_CONFIG_PATH = "FILLTRIP_CONFIG"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ApiConfig:
    """Persistence service connection settings."""
    base_url: str = DEFAULT_API_BASE
    timeout: float = 10.0

    def __post_init__(self):
        """Validate and normalize the service URL."""
        if not self.base_url or not self.base_url.strip():
            raise ValueError("api.base_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("api.timeout must be > 0")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))


@dataclass(frozen=True)
class RoutingConfig:
    """Routing provider settings."""
    base_url: str = MAPBOX_DIRECTIONS_URL
    access_token: Optional[str] = None


@dataclass(frozen=True)
class LoggingConfig:
    """Log output settings."""
    level: str = "WARNING"
    json: bool = False

    def __post_init__(self):
        """Validate the log level name."""
        if self.level.upper() not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of: {list(LOG_LEVELS)}")


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    api: ApiConfig = field(default_factory=ApiConfig)
    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_app_config(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> AppConfig:
    """Load and validate application configuration.

    Without a path, ``FILLTRIP_CONFIG`` or ``filltrip.yaml`` in the working
    directory is used if present; otherwise defaults apply. Environment
    variables override file values for the service URL and routing token.

    Args:
        path: Path to YAML configuration file
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    env = os.environ if env is None else env

    raw_config: Dict[str, Any] = {}
    config_path = path or env.get(ENV_CONFIG_PATH)
    if config_path:
        raw_config = _read_yaml(Path(config_path))
    elif Path(DEFAULT_CONFIG_PATH).exists():
        raw_config = _read_yaml(Path(DEFAULT_CONFIG_PATH))

    allowed_top_keys = {'api', 'matcher', 'routing', 'logging'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    api_data = _section(raw_config, 'api', {'base_url', 'timeout'})
    if env.get(ENV_API_BASE):
        api_data['base_url'] = env[ENV_API_BASE]
    if 'base_url' in api_data and not isinstance(api_data['base_url'], str):
        raise ValueError("'api.base_url' must be a string")
    if 'timeout' in api_data:
        api_data['timeout'] = _positive_number(api_data['timeout'], 'api.timeout')

    matcher_data = _section(
        raw_config, 'matcher',
        {'prefix_score', 'contains_score', 'max_results', 'min_query_length'}
    )
    for key, value in matcher_data.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"'matcher.{key}' must be an integer")

    routing_data = _section(raw_config, 'routing', {'base_url', 'access_token'})
    if env.get(ENV_MAPBOX_TOKEN):
        routing_data['access_token'] = env[ENV_MAPBOX_TOKEN]
    for key, value in routing_data.items():
        if value is not None and not isinstance(value, str):
            raise ValueError(f"'routing.{key}' must be a string")

    logging_data = _section(raw_config, 'logging', {'level', 'json'})
    if 'level' in logging_data and not isinstance(logging_data['level'], str):
        raise ValueError("'logging.level' must be a string")
    if 'json' in logging_data and not isinstance(logging_data['json'], bool):
        raise ValueError("'logging.json' must be true or false")

    return AppConfig(
        api=ApiConfig(**api_data),
        matcher=MatcherConfig(**matcher_data),
        routing=RoutingConfig(**routing_data),
        logging=LoggingConfig(**logging_data)
    )


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    """Read a YAML mapping from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If the document is not a mapping
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {config_path}: {e}")

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping")
    return raw_config


def _section(raw_config: Dict[str, Any], name: str, allowed_keys: set) -> Dict[str, Any]:
    """Extract an optional section and reject unknown keys.

    Raises:
        ValueError: If the section is not a mapping or has unknown keys
    """
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return dict(data)


def _positive_number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"'{path}' must be > 0")
    return float(value)
