"""Configuration data models."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, List, Optional

ENV_PREFIX = "DEBUGMCP_"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class DebugConfig:
    """Centralized configuration for the debug engine and its browser."""

    # Browser settings
    BROWSER_TYPE: str = "chromium"
    HEADLESS: bool = True
    SLOW_MO_MS: int = 0
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 720

    # Timeout applied by the browser library to every action
    ACTION_TIMEOUT_MS: int = 10000  # milliseconds

    # Output settings
    OUTPUT_DIR: str = "output"
    DEBUG_SUBDIR: str = "debug"
    PERSIST_STEP_SOURCE: bool = True

    # Execution settings
    DEFAULT_WAIT_MS: int = 1000
    CAPTURE_STATE_SCREENSHOT: bool = True

    @property
    def debug_dir(self) -> Path:
        """Directory receiving debug screenshots and persisted step sources."""
        return Path(self.OUTPUT_DIR) / self.DEBUG_SUBDIR

    @classmethod
    def from_env(cls, environ_prefix: str = ENV_PREFIX) -> "DebugConfig":
        """Create configuration from ``DEBUGMCP_*`` environment variables."""
        defaults = cls()
        return cls(
            BROWSER_TYPE=os.environ.get(
                f"{environ_prefix}BROWSER", defaults.BROWSER_TYPE
            ).strip().lower(),
            HEADLESS=_env_bool(f"{environ_prefix}HEADLESS", defaults.HEADLESS),
            SLOW_MO_MS=_env_int(f"{environ_prefix}SLOW_MO", defaults.SLOW_MO_MS),
            VIEWPORT_WIDTH=_env_int(
                f"{environ_prefix}VIEWPORT_WIDTH", defaults.VIEWPORT_WIDTH
            ),
            VIEWPORT_HEIGHT=_env_int(
                f"{environ_prefix}VIEWPORT_HEIGHT", defaults.VIEWPORT_HEIGHT
            ),
            ACTION_TIMEOUT_MS=_env_int(
                f"{environ_prefix}ACTION_TIMEOUT", defaults.ACTION_TIMEOUT_MS
            ),
            OUTPUT_DIR=os.environ.get(f"{environ_prefix}OUTPUT_DIR", defaults.OUTPUT_DIR),
            PERSIST_STEP_SOURCE=_env_bool(
                f"{environ_prefix}PERSIST_STEP_SOURCE", defaults.PERSIST_STEP_SOURCE
            ),
            DEFAULT_WAIT_MS=_env_int(
                f"{environ_prefix}DEFAULT_WAIT_MS", defaults.DEFAULT_WAIT_MS
            ),
            CAPTURE_STATE_SCREENSHOT=_env_bool(
                f"{environ_prefix}STATE_SCREENSHOT", defaults.CAPTURE_STATE_SCREENSHOT
            ),
        )

    @classmethod
    def from_dict(cls, config: Dict) -> "DebugConfig":
        """Create configuration from dictionary."""
        instance = cls()
        names = {f.name for f in fields(cls)}
        for key, value in config.items():
            if key in names:
                setattr(instance, key, value)
        return instance

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary."""
        return {
            key: value for key, value in self.__dict__.items()
            if not key.startswith('_')
        }

    def update(self, **kwargs) -> None:
        """Update configuration values."""
        names = {f.name for f in fields(self)}
        for key, value in kwargs.items():
            if key in names:
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration key: {key}")

    def validate(self) -> List[str]:
        """Validate configuration values and return any errors."""
        errors = []

        if self.BROWSER_TYPE not in SUPPORTED_BROWSERS:
            errors.append(
                f"BROWSER_TYPE must be one of: {', '.join(SUPPORTED_BROWSERS)}"
            )

        if self.ACTION_TIMEOUT_MS <= 0:
            errors.append("ACTION_TIMEOUT_MS must be positive")

        if self.SLOW_MO_MS < 0:
            errors.append("SLOW_MO_MS must not be negative")

        if self.DEFAULT_WAIT_MS < 0:
            errors.append("DEFAULT_WAIT_MS must not be negative")

        if self.VIEWPORT_WIDTH <= 0 or self.VIEWPORT_HEIGHT <= 0:
            errors.append("Viewport dimensions must be positive")

        return errors


def load_config(overrides: Optional[Dict] = None) -> DebugConfig:
    """Build the effective configuration: environment first, then explicit overrides."""
    config = DebugConfig.from_env()
    if overrides:
        config.update(**overrides)
    return config
