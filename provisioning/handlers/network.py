# provisioning/handlers/network.py
# -*- coding: utf-8 -*-
"""
Network interface addresses.

Every ``server_ips`` row waiting for work is applied to its interface with
``ip addr``. Rows in manual configuration mode are owned by the
administrator and are only acknowledged.
"""

import ipaddress
import subprocess
from typing import List

from common.command_utils import command_exists, run_command, run_elevated_command
from provisioning.handlers.base import BatchTaskHandler
from provisioning.models import Failure, Outcome, Success, TaskRow, TaskStatus
from provisioning.queries import NETWORK_INTERFACES


class NetworkInterfaceHandler(BatchTaskHandler):
    def setup(self) -> None:
        if not command_exists("ip"):
            self.logger.warning(
                "The 'ip' command was not found in PATH; address changes will fail"
            )

    def process_all(self) -> bool:
        rows = self.context.store.fetch_pending(NETWORK_INTERFACES)
        for row in rows:
            try:
                outcome = self.apply(row)
            except (subprocess.SubprocessError, OSError, ValueError) as e:
                outcome = Failure(str(e) or type(e).__name__)
            self.context.status_writer.write(row, outcome)
            self.context.record_outcome(row, outcome)
        return bool(rows)

    def build_command(self, row: TaskRow) -> List[str]:
        interface = ipaddress.ip_interface(
            f"{row.name}/{row.data.get('ip_netmask') or self._default_prefix(row.name)}"
        )
        device = row.data.get("ip_card") or self.settings.hooks.network_interface
        verb = "del" if row.status == TaskStatus.TODELETE else "replace"
        return ["ip", "addr", verb, interface.with_prefixlen, "dev", device]

    @staticmethod
    def _default_prefix(address: str) -> int:
        return ipaddress.ip_address(address).max_prefixlen

    def apply(self, row: TaskRow) -> Outcome:
        if row.data.get("ip_config_mode") == "manual":
            self.logger.info(
                f"Address {row.name} is configured manually; leaving the interface untouched"
            )
            return Success()

        command = self.build_command(row)
        runner = (
            run_elevated_command if self.settings.hooks.use_sudo else run_command
        )
        result = runner(
            command,
            self.settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
        )
        if result.returncode != 0:
            return Failure(
                (result.stderr or "").strip()
                or f"'{' '.join(command)}' exited with status {result.returncode}"
            )
        return Success()
