from unittest.mock import MagicMock

import psycopg
import pytest

from provisioning import cli
from provisioning.context import HeadlessContext, InteractiveContext
from provisioning.errors import QueryError
from provisioning.processor import RunReport


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ENGINE_MODE", raising=False)


@pytest.fixture
def mock_setup_logging(mocker):
    return mocker.patch("provisioning.cli.setup_logging")


@pytest.fixture
def mock_conn(mocker):
    conn = MagicMock()
    mocker.patch("provisioning.cli.get_db_connection", return_value=conn)
    return conn


@pytest.fixture
def mock_processor(mocker):
    processor_cls = mocker.patch("provisioning.cli.TaskProcessor")
    processor_cls.return_value.run.return_value = RunReport(mode="backend")
    return processor_cls


def test_parser_defaults_leave_settings_untouched():
    args = cli.build_parser().parse_args([])
    assert args.setup is None
    assert args.debug is None
    assert args.db_host is None


def test_headless_run_succeeds(mock_setup_logging, mock_conn, mock_processor, capsys):
    assert cli.main([]) == 0

    execution = mock_processor.call_args[0][1]
    assert isinstance(execution, HeadlessContext)
    mock_processor.return_value.run.assert_called_once()
    mock_conn.__enter__.assert_called_once()
    assert capsys.readouterr().out == ""


def test_setup_run_is_interactive_and_prints_summary(
    mock_setup_logging, mock_conn, mock_processor, capsys
):
    assert cli.main(["--setup"]) == 0

    execution = mock_processor.call_args[0][1]
    assert isinstance(execution, InteractiveContext)
    assert "0 task(s) processed, 0 failed" in capsys.readouterr().out


def test_aborted_run_exits_non_zero(mock_setup_logging, mock_conn, mock_processor):
    mock_processor.return_value.run.side_effect = QueryError("boom")

    assert cli.main([]) == 1


def test_connection_failure_exits_non_zero(mock_setup_logging, mocker, mock_processor):
    mocker.patch(
        "provisioning.cli.get_db_connection",
        side_effect=psycopg.OperationalError("connection refused"),
    )

    assert cli.main([]) == 1
    mock_processor.assert_not_called()


def test_log_dir_enables_engine_log(mock_setup_logging, mock_conn, mock_processor, tmp_path):
    cli.main(["--log-dir", str(tmp_path / "logs"), "--debug"])

    kwargs = mock_setup_logging.call_args[1]
    assert kwargs["log_file"] == str(tmp_path / "logs" / "engine.log")
    assert kwargs["log_level"] == 10


def test_metrics_textfile_written(mock_setup_logging, mock_conn, mock_processor, tmp_path):
    target = tmp_path / "engine.prom"

    cli.main(["--metrics-textfile", str(target)])

    assert target.exists()
    assert "provisioning_tasks_processed_total" in target.read_text()
