"""
Configuration Dataclasses

Type-safe configuration for the listener. Values come from defaults,
an optional YAML file, the environment and finally CLI flags.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

DEFAULT_UDP_PORT = 7654


@dataclass
class ListenerConfig:
    """Listener runtime configuration"""
    port: int = DEFAULT_UDP_PORT
    host: str = ""  # empty string binds all interfaces
    health_port: int | None = None  # None disables the HTTP health endpoint
    log_level: str = "INFO"
    json_logs: bool = True


def parse_port(value: Any, name: str = "port") -> int:
    """Convert a port given as str or int, rejecting anything out of range"""
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}")

    if not 0 <= port <= 65535:
        raise ConfigError(f"{name} out of range: {port}")
    return port


def load_config_file(config_path: str) -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary (empty for an empty file)
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return data


def load_listener_config(data: dict) -> ListenerConfig:
    """Load ListenerConfig from dictionary (e.g., from YAML file) and environment"""
    listener = data.get("listener") or {}
    logging_data = data.get("logging") or {}

    health_port = listener.get("health_port")

    return ListenerConfig(
        port=parse_port(listener.get("port", DEFAULT_UDP_PORT)),
        host=str(listener.get("host", "")),
        health_port=parse_port(health_port, "health_port") if health_port is not None else None,
        log_level=os.environ.get("HEALTHPING_LOG_LEVEL", str(logging_data.get("level", "INFO"))),
        json_logs=os.environ.get(
            "HEALTHPING_LOG_FORMAT", str(logging_data.get("format", "json"))
        ).lower() == "json",
    )
