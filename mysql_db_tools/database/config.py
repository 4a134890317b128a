"""
Database configuration management module.

This module turns the validated environment into a DatabaseConfig and
into the keyword arguments the driver's connection pool expects.
"""

import logging
from typing import Any, Dict

from mysql.connector.constants import ClientFlag

from ..config import Env, ConfigError
from ..models import DatabaseConfig

logger = logging.getLogger(__name__)

# mysql.connector caps pool size at 32
MAX_POOL_SIZE = 32


def create_database_config(env: Env) -> DatabaseConfig:
    """
    Create a database configuration from a loaded Env.

    Args:
        env: Validated environment configuration

    Returns:
        DatabaseConfig object

    Raises:
        ConfigError: If a value is outside what the driver accepts
    """
    if env.MYSQL_POOL_SIZE > MAX_POOL_SIZE:
        raise ConfigError(
            f"MYSQL_POOL_SIZE must be at most {MAX_POOL_SIZE}, got {env.MYSQL_POOL_SIZE}"
        )

    config = DatabaseConfig(
        host=env.MYSQL_HOST,
        user=env.MYSQL_USER,
        password=env.MYSQL_PASSWORD,
        port=env.MYSQL_PORT,
        database=env.MYSQL_DATABASE,
        charset=env.MYSQL_CHARSET,
        ssl=env.MYSQL_SSL,
        pool_size=env.MYSQL_POOL_SIZE,
        connect_timeout=env.MYSQL_CONNECT_TIMEOUT,
        acquire_timeout=env.MYSQL_ACQUIRE_TIMEOUT,
    )
    logger.debug(
        f"Database configuration: {config.user}@{config.host}:{config.port}/{config.database} "
        f"(pool_size={config.pool_size}, ssl={config.ssl})"
    )
    return config


def connection_kwargs(config: DatabaseConfig) -> Dict[str, Any]:
    """
    Build the connection arguments for the driver pool.

    TLS, when enabled, is non-strict: neither the server certificate nor
    its host name is verified. Multi-statement text is refused by the
    server, so one execute call runs exactly one statement.
    """
    kwargs: Dict[str, Any] = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "database": config.database,
        "charset": config.charset,
        "connection_timeout": config.connect_timeout,
        "autocommit": True,
        # The constructor stores an int as given; a +/- flag list is not applied there
        "client_flags": ClientFlag.get_default() & ~ClientFlag.MULTI_STATEMENTS,
    }
    if config.ssl:
        kwargs.update(
            ssl_disabled=False,
            ssl_verify_cert=False,
            ssl_verify_identity=False,
        )
    else:
        kwargs["ssl_disabled"] = True
    return kwargs
