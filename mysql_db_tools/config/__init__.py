"""
Configuration management for the MySQL tools package.

This module provides centralized configuration handling with support for
environment variables and .env.local files, validated by a Pydantic schema.
"""

from .env import Env, ConfigError
from .schema import ConfigSchema
from .loader import ConfigLoader

__all__ = ["Env", "ConfigError", "ConfigSchema", "ConfigLoader"]
