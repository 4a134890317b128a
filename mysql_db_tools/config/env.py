"""
Environment configuration management module.

This module provides a centralized Environment manager class that loads,
validates, and serves the MySQL connection settings. Validation is done
by the schema-driven ConfigLoader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Mapping, Optional

from .schema import ConfigSchema
from .loader import ConfigLoader
from ..constants import (
    DEFAULT_PORT,
    DEFAULT_DATABASE,
    DEFAULT_CHARSET,
    DEFAULT_POOL_SIZE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_ACQUIRE_TIMEOUT,
)

logger = logging.getLogger(__name__)

# Module-level singleton instance
_ENV: Optional["Env"] = None

SENSITIVE_KEYS = ("MYSQL_PASSWORD",)


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass(frozen=True)
class Env:
    """Immutable configuration container for environment variables."""

    MYSQL_HOST: str
    MYSQL_USER: str
    MYSQL_PASSWORD: str
    MYSQL_PORT: int = DEFAULT_PORT
    MYSQL_DATABASE: str = DEFAULT_DATABASE
    MYSQL_SSL: bool = False
    MYSQL_CHARSET: str = DEFAULT_CHARSET
    MYSQL_POOL_SIZE: int = DEFAULT_POOL_SIZE
    MYSQL_CONNECT_TIMEOUT: int = DEFAULT_CONNECT_TIMEOUT
    MYSQL_ACQUIRE_TIMEOUT: int = DEFAULT_ACQUIRE_TIMEOUT

    @staticmethod
    def load(overrides: Optional[Mapping[str, Any]] = None) -> "Env":
        """
        Load configuration from .env.local and the process environment.

        Args:
            overrides: Optional mapping of env var name to value, applied last

        Returns:
            Configured Env instance, also stored as the current instance

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        global _ENV

        try:
            config = ConfigLoader.load(schema=ConfigSchema, overrides=overrides)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        _ENV = Env._from_schema(config)
        logger.debug("Environment configuration loaded successfully")
        return _ENV

    @staticmethod
    def current() -> "Env":
        """
        Return the globally-initialized Env instance.

        Raises:
            ConfigError: If Env.load() has not been called yet
        """
        if _ENV is None:
            raise ConfigError("Environment not initialized. Call Env.load() first.")
        return _ENV

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Env":
        """
        Create Env instance from a mapping instead of os.environ (useful for testing).

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        try:
            config = ConfigLoader.load(schema=ConfigSchema, environ=mapping)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return cls._from_schema(config)

    @staticmethod
    def _from_schema(config: ConfigSchema) -> "Env":
        return Env(
            MYSQL_HOST=config.mysql_host,
            MYSQL_USER=config.mysql_user,
            MYSQL_PASSWORD=config.mysql_password,
            MYSQL_PORT=config.mysql_port,
            MYSQL_DATABASE=config.mysql_database,
            MYSQL_SSL=config.mysql_ssl,
            MYSQL_CHARSET=config.mysql_charset,
            MYSQL_POOL_SIZE=config.mysql_pool_size,
            MYSQL_CONNECT_TIMEOUT=config.mysql_connect_timeout,
            MYSQL_ACQUIRE_TIMEOUT=config.mysql_acquire_timeout,
        )

    def to_dict(self) -> dict:
        """Convert environment to dictionary representation."""
        return asdict(self)

    def mask(self) -> dict:
        """Return masked version for safe logging (hides the password)."""
        masked = self.to_dict()
        for key in SENSITIVE_KEYS:
            masked[key] = "***" if masked[key] else None
        return masked
