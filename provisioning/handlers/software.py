# provisioning/handlers/software.py
# -*- coding: utf-8 -*-
"""
Software instance and package tasks.

These run out of process: the row's fields are serialised as an ordered
JSON list, base64 encoded, and passed as the only argument to the
configured manager executable. A non-zero exit status or anything written
to stderr is a failure. The manager's scratch directory is removed after
each task.
"""

import base64
import json
import shutil
from pathlib import Path
from typing import List, Sequence, Tuple

from common.command_utils import run_command
from provisioning.handlers.base import TaskHandler
from provisioning.models import Failure, Outcome, Success, TaskRow

SOFTWARE_INSTANCE_FIELDS: Tuple[str, ...] = (
    "domain_id",
    "software_id",
    "path",
    "software_prefix",
    "db",
    "database_user",
    "database_tmp_pwd",
    "install_username",
    "install_password",
    "install_email",
    "software_status",
    "software_depot",
    "software_master_id",
    "alias_id",
    "subdomain_id",
    "subdomain_alias_id",
)

SOFTWARE_PACKAGE_FIELDS: Tuple[str, ...] = (
    "software_id",
    "reseller_id",
    "software_archive",
    "software_status",
    "software_depot",
)


def encode_payload(row: TaskRow, fields: Sequence[str]) -> str:
    """Serialise the row's fields, in order, as base64-encoded JSON."""
    values = [row.data.get(field) for field in fields]
    raw = json.dumps(values, default=str).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class ExternalTaskHandler(TaskHandler):
    """Hands a task row to an external executable."""

    payload_fields: Tuple[str, ...] = ()
    # Fields naming the scratch directory: <tmp_dir>/sw-<a>-<b>
    scratch_fields: Tuple[str, str] = ("", "")

    def manager_command(self) -> List[str]:
        raise NotImplementedError

    def scratch_dir(self, row: TaskRow) -> Path:
        first, second = self.scratch_fields
        return Path(self.settings.software.tmp_dir) / (
            f"sw-{row.data.get(first)}-{row.data.get(second)}"
        )

    def handle(self, row: TaskRow, action: str) -> Outcome:
        payload = encode_payload(row, self.payload_fields)
        result = run_command(
            self.manager_command() + [payload],
            self.settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
        )
        stderr = (result.stderr or "").strip()
        if result.returncode != 0 or stderr:
            return Failure(stderr or "Unknown error")

        scratch = self.scratch_dir(row)
        try:
            if scratch.exists():
                shutil.rmtree(scratch)
        except OSError as e:
            return Failure(f"Could not remove {scratch}: {e}")
        return Success()


class SoftwareInstanceHandler(ExternalTaskHandler):
    payload_fields = SOFTWARE_INSTANCE_FIELDS
    scratch_fields = ("domain_id", "software_id")

    def manager_command(self) -> List[str]:
        return list(self.settings.software.instance_manager_command)


class SoftwarePackageHandler(ExternalTaskHandler):
    payload_fields = SOFTWARE_PACKAGE_FIELDS
    scratch_fields = ("software_archive", "software_id")

    def manager_command(self) -> List[str]:
        return list(self.settings.software.package_manager_command)
