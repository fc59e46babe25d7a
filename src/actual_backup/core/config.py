#!/usr/bin/env python3
"""
Configuration Management for Actual Budget Backups

Handles environment-based configuration with secure defaults and validation.
The server credential is never logged; use to_dict() for anything that is
displayed.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DEFAULT_TIMEOUT_SECONDS = 30


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class ServerConfig:
    """Actual sync server connection settings."""

    url: str | None = None
    password: str | None = field(default=None, repr=False)
    timeout: int = DEFAULT_TIMEOUT_SECONDS


@dataclass
class Config:
    """
    Main configuration class for the backup tool.

    Loads configuration from environment variables. Loading never fails on
    missing values; validate() reports them so callers can fail before doing
    any I/O.
    """

    environment: Environment
    server: ServerConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """
        Create configuration from environment variables.

        Raises:
            ConfigurationError: If ACTUAL_BACKUP_ENV names an unknown environment
        """
        env_name = os.getenv("ACTUAL_BACKUP_ENV", "production").lower()
        try:
            env = Environment(env_name)
        except ValueError as e:
            valid = ", ".join(member.value for member in Environment)
            raise ConfigurationError(f"ACTUAL_BACKUP_ENV must be one of {valid}, got {env_name!r}") from e

        server = ServerConfig(
            url=os.getenv("SERVER_URL") or None,
            password=os.getenv("SERVER_PASSWORD") or None,
            timeout=_parse_int(os.getenv("ACTUAL_TIMEOUT"), DEFAULT_TIMEOUT_SECONDS),
        )

        return cls(
            environment=env,
            server=server,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.server.url:
            errors.append("Environment variable SERVER_URL is not set")
        if not self.server.password:
            errors.append("Environment variable SERVER_PASSWORD is not set")

        if self.server.timeout <= 0:
            errors.append("ACTUAL_TIMEOUT must be positive")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level_name = "DEBUG" if self.debug else self.log_level
        level = getattr(logging, level_name, logging.INFO)

        # Configure format based on environment
        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger("actual_backup").setLevel(level)

        # Reduce noise from external libraries
        if self.environment != Environment.DEVELOPMENT:
            logging.getLogger("urllib3").setLevel(logging.WARNING)
            logging.getLogger("requests").setLevel(logging.WARNING)

    def get_sensitive_fields(self) -> list:
        """Get list of field names that contain sensitive data."""
        return ["server.password"]

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if isinstance(field_value, Enum):
                result[field_name] = field_value.value
            elif hasattr(field_value, "__dict__"):
                # Nested dataclass
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    full_field_name = f"{field_name}.{nested_name}"

                    if not include_sensitive and full_field_name in self.get_sensitive_fields():
                        nested_dict[nested_name] = "***REDACTED***"
                    elif isinstance(nested_value, Path):
                        nested_dict[nested_name] = str(nested_value)
                    else:
                        nested_dict[nested_name] = nested_value

                result[field_name] = nested_dict
            else:
                result[field_name] = field_value

        return result


def _parse_int(value: str | None, default: int) -> int:
    """Parse an integer setting, falling back to the default when unset or malformed."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-integer setting {value!r}, using {default}")
        return default
