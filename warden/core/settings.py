"""Warden - Configuration system with Pydantic Settings

Only logging behaviour is configurable. Validation limits live in
warden.core.constants and cannot be changed at runtime.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pydantic_settings
from pydantic import Field, field_validator
from pydantic_settings import DotEnvSettingsSource, EnvSettingsSource, PydanticBaseSettingsSource
from pydantic_settings.main import SettingsConfigDict

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "reload_settings",
    "get_log_dir",
]

APP_DIR_NAME = "warden"
ENV_PREFIX = "WARDEN_"


def _xdg_base_dir(env_var_name: str, fallback: Path) -> Path:
    env_value = os.getenv(env_var_name)
    if env_value:
        return Path(env_value).expanduser()
    return fallback


def get_log_dir() -> Path:
    """Default audit log directory: $XDG_STATE_HOME/warden/logs."""
    base = _xdg_base_dir("XDG_STATE_HOME", Path.home() / ".local" / "state")
    return base / APP_DIR_NAME / "logs"


def _config_dir() -> Path:
    return _xdg_base_dir("XDG_CONFIG_HOME", Path.home() / ".config") / APP_DIR_NAME


class Settings(pydantic_settings.BaseSettings):
    """Application settings with type-safe validation"""

    # Logging
    log_level: str = Field(default="INFO")
    redact_all_sensitive: bool = Field(default=False)

    # Audit log file sink
    log_file_enabled: bool = Field(default=False)
    log_dir: str = Field(default_factory=lambda: str(get_log_dir()))
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[pydantic_settings.BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        del env_settings, dotenv_settings

        explicit_env_files = settings_cls.model_config.get("env_file")
        env_files = explicit_env_files if explicit_env_files is not None else (
            ".env",
            _config_dir() / ".env",
        )
        return (
            init_settings,
            EnvSettingsSource(settings_cls, env_prefix=ENV_PREFIX, case_sensitive=False),
            DotEnvSettingsSource(
                settings_cls, env_prefix=ENV_PREFIX, env_file=env_files, case_sensitive=False
            ),
            file_secret_settings,
        )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def log_dir_path(self) -> Path:
        """
        Get the audit log directory as a Path object.

        Returns:
            The log directory path with ~ expanded.
        """
        return Path(self.log_dir).expanduser()


settings: Settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings singleton instance.

    Returns:
        The global Settings instance.
    """
    return settings


def reload_settings() -> Settings:
    """
    Reload settings from the current environment and replace the singleton.

    Returns:
        A new Settings instance with current environment values.
    """
    global settings
    settings = Settings()
    return settings
