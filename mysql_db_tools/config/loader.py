"""
Schema-driven configuration loader.

This module provides a ConfigLoader that uses the configuration schema
to load, validate, and merge configuration from multiple sources.
"""

import logging
import os
from typing import Dict, Any, Optional, Mapping

from dotenv import load_dotenv
from pydantic import ValidationError

from .schema import ConfigSchema


logger = logging.getLogger(__name__)

DOTENV_FILE = ".env.local"


class ConfigLoader:
    """Loads and validates configuration using a schema-driven approach."""

    @staticmethod
    def load(
        schema: type[ConfigSchema] = ConfigSchema,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> ConfigSchema:
        """
        Load configuration from all sources with precedence handling.

        Loading order (lowest to highest priority):
        1. Schema defaults
        2. .env.local file (if it exists; never overrides the OS environment)
        3. OS environment variables
        4. Explicit overrides keyed by environment variable name

        Args:
            schema: The configuration schema class to use
            overrides: Mapping of env var name to value, applied last
            environ: Environment to read instead of os.environ (skips .env.local)

        Returns:
            Validated configuration instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        config_dict: Dict[str, Any] = {}

        if environ is None:
            _load_from_dotenv_file()
            environ = os.environ

        for field_name, field_info in schema.model_fields.items():
            env_var = _env_var_for(field_info)
            if not env_var:
                continue

            value = environ.get(env_var)
            if overrides and overrides.get(env_var) is not None:
                value = overrides[env_var]

            if value is None:
                continue
            if isinstance(value, str):
                stripped = value.strip()
                # Empty strings fall back to the default, or count as missing
                if stripped:
                    config_dict[field_name] = stripped
            else:
                config_dict[field_name] = value

        try:
            config = schema(**config_dict)
            logger.debug("Configuration loaded and validated successfully")
            return config
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = error["loc"][0]
                field_info = schema.model_fields.get(field)
                env_var = _env_var_for(field_info) if field_info else None
                if error["type"] == "missing":
                    msg = "required environment variable is not set"
                else:
                    msg = error["msg"]
                errors.append(f"{env_var or str(field).upper()}: {msg}")

            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
            raise ValueError(error_msg) from e


def _env_var_for(field_info) -> Optional[str]:
    extra = field_info.json_schema_extra
    return extra.get("env_var") if extra else None


def _load_from_dotenv_file() -> None:
    """Load values from .env.local if the file exists."""
    if os.path.exists(DOTENV_FILE):
        load_dotenv(DOTENV_FILE, override=False)
        logger.debug("Loaded configuration from %s file", DOTENV_FILE)
    else:
        logger.debug("%s file not found, skipping", DOTENV_FILE)
