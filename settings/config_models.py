# settings/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for engine configuration.

This module defines the structured settings for the provisioning engine,
including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
LOG_PREFIX_DEFAULT: str = "[ENGINE]"
MODE_DEFAULT: str = "backend"

DB_HOST_DEFAULT: str = "127.0.0.1"
DB_PORT_DEFAULT: int = 5432
DB_NAME_DEFAULT: str = "hosting_panel"
DB_USER_DEFAULT: str = "panel_engine"
DB_PASSWORD_DEFAULT: str = "yourStrongPasswordHere"

HOOKS_DIR_DEFAULT: str = "/etc/provisioning/hooks"
NETWORK_INTERFACE_DEFAULT: str = "eth0"
SOFTWARE_TMP_DIR_DEFAULT: str = "/tmp"

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class DatabaseSettings(BaseSettings):
    """Connection settings for the panel database."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_DB_", extra="ignore")

    host: str = Field(default=DB_HOST_DEFAULT, description="Database host.")
    port: int = Field(default=DB_PORT_DEFAULT, description="Database port.")
    database: str = Field(
        default=DB_NAME_DEFAULT, description="Panel database name."
    )
    user: str = Field(default=DB_USER_DEFAULT, description="Database user.")
    password: str = Field(
        default=DB_PASSWORD_DEFAULT,
        description="Database password.",
        exclude=True,
    )
    connect_timeout: int = Field(
        default=10, description="Connection timeout in seconds."
    )


class HookSettings(BaseModel):
    """Where per-entity provisioning hooks live and how they are run."""

    hooks_dir: Path = Field(
        default=Path(HOOKS_DIR_DEFAULT),
        description="Directory holding <entity>/<action> executables.",
    )
    network_interface: str = Field(
        default=NETWORK_INTERFACE_DEFAULT,
        description="Default interface for addresses without an explicit card.",
    )
    use_sudo: bool = Field(
        default=False,
        description="Run ip address commands through sudo when not root.",
    )


class SoftwareSettings(BaseModel):
    """Out-of-process software installer commands."""

    instance_manager_command: List[str] = Field(
        default_factory=lambda: ["/usr/local/sbin/sw-mngr"],
        description="Executable (and leading args) handling software instances.",
    )
    package_manager_command: List[str] = Field(
        default_factory=lambda: ["/usr/local/sbin/pkt-mngr"],
        description="Executable (and leading args) handling software packages.",
    )
    tmp_dir: Path = Field(
        default=Path(SOFTWARE_TMP_DIR_DEFAULT),
        description="Parent of the sw-* scratch directories removed after each task.",
    )


class AppSettings(BaseSettings):
    """Main engine settings."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_", extra="ignore")

    mode: Literal["backend", "setup"] = Field(
        default=MODE_DEFAULT,
        description="'backend' for headless runs, 'setup' for interactive runs.",
    )
    log_prefix: str = Field(
        default=LOG_PREFIX_DEFAULT, description="Prefix for console log lines."
    )
    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for per-task log files. Disabled when unset.",
    )
    debug: bool = Field(default=False, description="Enable debug logging.")
    metrics_textfile: Optional[Path] = Field(
        default=None,
        description="Write Prometheus metrics to this file after each run.",
    )

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    hooks: HookSettings = Field(default_factory=HookSettings)
    software: SoftwareSettings = Field(default_factory=SoftwareSettings)

    symbols: Dict[str, str] = Field(
        default_factory=lambda: dict(SYMBOLS_DEFAULT)
    )
