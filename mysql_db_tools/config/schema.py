"""
Configuration schema definition using Pydantic.

This module defines the declarative configuration schema that serves as
the single source of truth for the MySQL connection settings.
"""

from typing import Any
from pydantic import BaseModel, Field, field_validator

from ..constants import (
    DEFAULT_PORT,
    DEFAULT_DATABASE,
    DEFAULT_CHARSET,
    DEFAULT_POOL_SIZE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_ACQUIRE_TIMEOUT,
)


class ConfigSchema(BaseModel):
    """
    Declarative configuration schema.

    Each field is read from the environment variable named in its
    ``env_var`` extra.
    """

    mysql_host: str = Field(
        ...,
        description="MySQL server hostname",
        json_schema_extra={"env_var": "MYSQL_HOST"},
    )

    mysql_port: int = Field(
        DEFAULT_PORT,
        ge=1,
        le=65535,
        description="MySQL server port",
        json_schema_extra={"env_var": "MYSQL_PORT"},
    )

    mysql_user: str = Field(
        ...,
        description="MySQL account name",
        json_schema_extra={"env_var": "MYSQL_USER"},
    )

    mysql_password: str = Field(
        ...,
        description="MySQL account password",
        json_schema_extra={
            "env_var": "MYSQL_PASSWORD",
            "sensitive": True,
        },
    )

    mysql_database: str = Field(
        DEFAULT_DATABASE,
        description="Default schema for new connections",
        json_schema_extra={"env_var": "MYSQL_DATABASE"},
    )

    mysql_ssl: bool = Field(
        False,
        description="Connect over TLS without certificate verification",
        json_schema_extra={"env_var": "MYSQL_SSL"},
    )

    mysql_charset: str = Field(
        DEFAULT_CHARSET,
        description="Connection character set",
        json_schema_extra={"env_var": "MYSQL_CHARSET"},
    )

    mysql_pool_size: int = Field(
        DEFAULT_POOL_SIZE,
        ge=1,
        description="Maximum number of pooled connections",
        json_schema_extra={"env_var": "MYSQL_POOL_SIZE"},
    )

    mysql_connect_timeout: int = Field(
        DEFAULT_CONNECT_TIMEOUT,
        ge=1,
        description="Seconds to wait when opening a connection",
        json_schema_extra={"env_var": "MYSQL_CONNECT_TIMEOUT"},
    )

    mysql_acquire_timeout: int = Field(
        DEFAULT_ACQUIRE_TIMEOUT,
        ge=1,
        description="Seconds to wait for a free pooled connection",
        json_schema_extra={"env_var": "MYSQL_ACQUIRE_TIMEOUT"},
    )

    @field_validator("mysql_ssl", mode="before")
    @classmethod
    def parse_ssl_flag(cls, v: Any) -> bool:
        """Only the literal string "true" (any case) enables TLS."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return bool(v)

    model_config = {
        "validate_assignment": True,
        "extra": "forbid"
    }
