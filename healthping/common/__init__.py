"""
Common Utilities

Shared modules used across the listener:
- config.py - Configuration dataclass and YAML loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- stop_signal.py - Single-fire stop signal
"""

from .config import (
    ListenerConfig,
    DEFAULT_UDP_PORT,
    load_config_file,
    load_listener_config,
    parse_port,
)
from .exceptions import (
    HealthPingError,
    ConfigError,
    ChannelError,
    BindError,
    ReceiveError,
    SendError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    log_command,
)
from .stop_signal import StopSignal

__all__ = [
    # Config
    "ListenerConfig",
    "DEFAULT_UDP_PORT",
    "load_config_file",
    "load_listener_config",
    "parse_port",
    # Exceptions
    "HealthPingError",
    "ConfigError",
    "ChannelError",
    "BindError",
    "ReceiveError",
    "SendError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "log_command",
    # Signals
    "StopSignal",
]
