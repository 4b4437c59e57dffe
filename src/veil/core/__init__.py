"""Veil Core - configuration, logging and the exception hierarchy."""

from .config import VeilSettings, clear_config_cache, get_config
from .exceptions import (
    CodecError,
    ConfigException,
    KeyMaterialError,
    VeilException,
)
from .logging import (
    configure_logging,
    get_logger,
    get_operation_id,
    operation_context,
    redact,
)

__all__ = [
    # Config
    "VeilSettings",
    "get_config",
    "clear_config_cache",
    # Exceptions
    "VeilException",
    "CodecError",
    "KeyMaterialError",
    "ConfigException",
    # Logging
    "configure_logging",
    "get_logger",
    "get_operation_id",
    "operation_context",
    "redact",
]
