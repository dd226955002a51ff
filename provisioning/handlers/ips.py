# provisioning/handlers/ips.py
# -*- coding: utf-8 -*-
"""
IP address reconciliation.

Runs after the domain pipeline whenever a domain-level entity changed.
The addresses still referenced by consistent domains and aliases are
handed, as a JSON list on standard input, to the
``<hooks_dir>/IpAddress/reconcile`` hook so the web, mail and DNS services
can rebuild their listen directives. Any failure here is fatal for the
run, which the processor enforces.
"""

import json
import os
from pathlib import Path

from common.command_utils import run_command
from provisioning.handlers.base import BatchTaskHandler
from provisioning.queries import IP_ADDRESSES_IN_USE

RECONCILE_HOOK = "reconcile"


class IpAddressHandler(BatchTaskHandler):
    def process_all(self) -> bool:
        records = self.context.store.fetch_rows(IP_ADDRESSES_IN_USE)
        addresses = [
            {
                "id": record["ip_id"],
                "address": record["ip_number"],
                "card": record.get("ip_card"),
            }
            for record in records
        ]
        self.logger.info(f"Reconciling {len(addresses)} IP address(es)")

        hook = (
            Path(self.settings.hooks.hooks_dir)
            / str(self.entity_type)
            / RECONCILE_HOOK
        )
        if not (hook.is_file() and os.access(hook, os.X_OK)):
            self.logger.debug(f"No IP reconciliation hook at {hook}")
            return bool(addresses)

        result = run_command(
            [str(hook)],
            self.settings,
            check=False,
            capture_output=True,
            cmd_input=json.dumps(addresses),
            current_logger=self.logger,
        )
        if result.returncode != 0:
            raise RuntimeError(
                (result.stderr or "").strip()
                or f"IP reconciliation hook exited with status {result.returncode}"
            )
        return True
