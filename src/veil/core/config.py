"""Core configuration - centralized config for the veil package.

All environment-based configuration should flow through this module.

Usage:
    from veil.core.config import get_config
    config = get_config()

    codec_name = config.default_codec
    strict = config.strict_bind
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMATS = ("", "json", "text")


class VeilSettings(BaseSettings):
    """Core configuration settings for Veil.

    Settings can be configured via VEIL_ environment variables or a
    ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="VEIL_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="VEIL_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="VEIL_LOG_FILE",
    )

    # ==========================================================================
    # ENCRYPTED VALUE SETTINGS
    # ==========================================================================

    default_codec: str = Field(
        default="pickle",
        description="Codec used by materialize when none is given: 'pickle', 'json', 'text' or 'bytes'",
        validation_alias="VEIL_DEFAULT_CODEC",
    )
    strict_bind: bool = Field(
        default=False,
        description="Deny the second bind conjunct when the composer cannot reveal the upstream value",
        validation_alias="VEIL_STRICT_BIND",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: VeilSettings | None = None


def get_config() -> VeilSettings:
    """Get the global configuration instance.

    Returns:
        The singleton VeilSettings instance.
    """
    global _config
    if _config is None:
        _config = VeilSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
