from unittest.mock import MagicMock

import psycopg
import pytest
from psycopg.conninfo import conninfo_to_dict

from common.db_utils import build_conninfo, get_db_connection
from settings.config_models import DatabaseSettings


@pytest.fixture
def db_settings():
    return DatabaseSettings(
        host="db.internal",
        port=6432,
        database="panel",
        user="engine",
        password="s3cret pass",
    )


def test_build_conninfo(db_settings):
    params = conninfo_to_dict(build_conninfo(db_settings))

    assert params == {
        "dbname": "panel",
        "user": "engine",
        "password": "s3cret pass",
        "host": "db.internal",
        "port": "6432",
        "connect_timeout": "10",
    }


def test_build_conninfo_skips_empty_values(db_settings):
    db_settings.host = ""
    assert "host" not in conninfo_to_dict(build_conninfo(db_settings))


def test_get_db_connection_successful(mocker, db_settings):
    """Test successful database connection."""
    mock_conn = MagicMock()
    mock_connect = mocker.patch("psycopg.connect", return_value=mock_conn)

    assert get_db_connection(db_settings) is mock_conn
    assert mock_connect.call_args[1] == {"autocommit": True}


def test_get_db_connection_operational_error(mocker, db_settings):
    """Connection errors are logged and re-raised."""
    mocker.patch("psycopg.connect", side_effect=psycopg.OperationalError("refused"))
    mock_error = mocker.patch("common.db_utils.module_logger.error")

    with pytest.raises(psycopg.OperationalError):
        get_db_connection(db_settings)
    assert mock_error.call_count == 1


def test_get_db_connection_placeholder_password(mocker):
    """Test critical log for default placeholder password."""
    mocker.patch("psycopg.connect", return_value=MagicMock())
    mock_critical = mocker.patch("common.db_utils.module_logger.critical")

    get_db_connection(DatabaseSettings(password="yourStrongPasswordHere"))

    mock_critical.assert_called_once()
