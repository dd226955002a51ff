# common/db_utils.py
# -*- coding: utf-8 -*-
"""
Panel database connection helpers.
"""

import logging
from typing import Optional

import psycopg
from psycopg.conninfo import make_conninfo

from settings.config_models import DB_PASSWORD_DEFAULT, DatabaseSettings

module_logger = logging.getLogger(__name__)


def build_conninfo(db_settings: DatabaseSettings) -> str:
    """Build a libpq connection string from the database settings."""
    conn_kwargs = {
        "dbname": db_settings.database,
        "user": db_settings.user,
        "password": db_settings.password,
        "host": db_settings.host,
        "port": db_settings.port,
        "connect_timeout": db_settings.connect_timeout,
    }
    return make_conninfo(
        **{
            key: value
            for key, value in conn_kwargs.items()
            if value is not None and value != ""
        }
    )


def get_db_connection(
    db_settings: DatabaseSettings,
    current_logger: Optional[logging.Logger] = None,
) -> psycopg.Connection:
    """
    Open an autocommit connection to the panel database with Psycopg 3.

    Each status write must be durable before the next task row is touched,
    so the connection runs in autocommit mode.

    Args:
        db_settings: Connection parameters.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        psycopg.Connection: An open connection.

    Raises:
        psycopg.OperationalError: The server cannot be reached or rejected the login.
        psycopg.Error: Any other driver error.
    """
    logger_to_use = current_logger if current_logger else module_logger

    if db_settings.password == DB_PASSWORD_DEFAULT:
        logger_to_use.critical(
            "CRITICAL: Default placeholder password is being used for the database "
            "connection. Configure a real password via config.yaml or ENGINE_DB_PASSWORD."
        )

    conninfo_str = build_conninfo(db_settings)
    try:
        conn = psycopg.connect(conninfo_str, autocommit=True)
    except psycopg.OperationalError as e:
        logger_to_use.error(
            f"Database connection failed (OperationalError): {e}"
        )
        raise
    except psycopg.Error as e:
        logger_to_use.error(f"Database connection failed: {e}")
        raise

    logger_to_use.info(
        f"Connected to database {db_settings.database} on "
        f"{db_settings.host}:{db_settings.port}."
    )
    return conn
