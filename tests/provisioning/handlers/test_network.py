import subprocess

import pytest

from provisioning.handlers.network import NetworkInterfaceHandler
from provisioning.models import EntityType, Failure, Success, TaskRow, TaskStatus


def ip_row(status=TaskStatus.TOADD, **data):
    return TaskRow(EntityType.NETWORK_INTERFACE, 1, data.pop("address", "192.0.2.10"), status, data=data)


@pytest.fixture
def handler(run_context):
    return NetworkInterfaceHandler(EntityType.NETWORK_INTERFACE, run_context)


class TestBuildCommand:
    def test_add_uses_replace_on_configured_card(self, handler):
        row = ip_row(ip_card="ens3", ip_netmask=24)
        assert handler.build_command(row) == [
            "ip", "addr", "replace", "192.0.2.10/24", "dev", "ens3",
        ]

    def test_delete_uses_del(self, handler):
        row = ip_row(TaskStatus.TODELETE, ip_card="ens3", ip_netmask=24)
        assert handler.build_command(row)[2] == "del"

    def test_defaults_to_host_prefix_and_default_interface(self, handler):
        assert handler.build_command(ip_row()) == [
            "ip", "addr", "replace", "192.0.2.10/32", "dev", "eth0",
        ]

    def test_ipv6(self, handler):
        row = ip_row(address="2001:db8::1", ip_card="ens3")
        assert handler.build_command(row)[3] == "2001:db8::1/128"

    def test_invalid_address(self, handler):
        with pytest.raises(ValueError):
            handler.build_command(ip_row(address="not-an-ip"))


class TestApply:
    def test_manual_mode_is_acknowledged_only(self, handler, mocker):
        mock_run = mocker.patch("provisioning.handlers.network.run_command")

        assert handler.apply(ip_row(ip_config_mode="manual")) == Success()
        mock_run.assert_not_called()

    def test_command_failure(self, handler, mocker):
        mocker.patch(
            "provisioning.handlers.network.run_command",
            return_value=subprocess.CompletedProcess([], 2, "", "RTNETLINK answers: Operation not permitted\n"),
        )

        outcome = handler.apply(ip_row(ip_card="ens3"))

        assert outcome == Failure("RTNETLINK answers: Operation not permitted")

    def test_use_sudo_runs_elevated(self, handler, mocker):
        handler.settings.hooks.use_sudo = True
        mock_plain = mocker.patch("provisioning.handlers.network.run_command")
        mock_elevated = mocker.patch(
            "provisioning.handlers.network.run_elevated_command",
            return_value=subprocess.CompletedProcess([], 0, "", ""),
        )

        assert handler.apply(ip_row(ip_card="ens3")) == Success()
        mock_elevated.assert_called_once()
        mock_plain.assert_not_called()


class TestProcessAll:
    def test_each_row_written_and_isolated(self, handler, memory_store, mocker):
        good = memory_store.insert(
            "server_ips", ip_id=1, ip_number="192.0.2.10", ip_status="toadd",
            ip_card="ens3", ip_netmask=24, ip_config_mode="auto",
        )
        bad = memory_store.insert(
            "server_ips", ip_id=2, ip_number="bogus", ip_status="tochange",
            ip_card="ens3", ip_netmask=24, ip_config_mode="auto",
        )
        gone = memory_store.insert(
            "server_ips", ip_id=3, ip_number="192.0.2.30", ip_status="todelete",
            ip_card="ens3", ip_netmask=24, ip_config_mode="auto",
        )
        mock_run = mocker.patch(
            "provisioning.handlers.network.run_command",
            return_value=subprocess.CompletedProcess([], 0, "", ""),
        )

        assert handler.process_all() is True

        assert good["ip_status"] == "ok"
        assert bad["ip_status"] == "tochange"
        assert bad["last_error"]
        assert gone not in memory_store.tables["server_ips"]
        assert mock_run.call_count == 2

    def test_nothing_pending(self, handler, memory_store):
        memory_store.insert("server_ips", ip_id=1, ip_number="192.0.2.10", ip_status="ok")
        assert handler.process_all() is False


def test_setup_warns_without_ip_command(handler, mocker, caplog):
    mocker.patch("provisioning.handlers.network.command_exists", return_value=False)

    handler.setup()

    assert "'ip' command was not found" in caplog.text
