# provisioning/handlers/hooks.py
# -*- coding: utf-8 -*-
"""
Per-row handler delegating the real work to executable hooks.

Hooks are looked up as ``<hooks_dir>/<EntityType>/<action>``, for example
``/etc/provisioning/hooks/Domain/add``. The hook receives the row id and
name as arguments and the task details in ``TASK_*`` environment
variables. An entity type without a hook for an action needs no
system-side work for it, so the transition simply succeeds.
"""

import os
from pathlib import Path
from typing import Dict, Optional

from common.command_utils import run_command
from provisioning.handlers.base import TaskHandler
from provisioning.models import Failure, Outcome, Success, TaskRow


class HookTaskHandler(TaskHandler):
    def setup(self) -> None:
        hooks_root = Path(self.settings.hooks.hooks_dir)
        hook_dir = self.hook_dir
        if hook_dir.is_dir():
            self.logger.debug(f"Using hooks from {hook_dir}")
        elif not hooks_root.is_dir():
            self.logger.warning(
                f"Hook directory {hooks_root} does not exist; {self.entity_type} "
                f"tasks will be marked done without running any hook"
            )
        else:
            self.logger.debug(
                f"No hook directory for {self.entity_type} at {hook_dir}"
            )

    @property
    def hook_dir(self) -> Path:
        return Path(self.settings.hooks.hooks_dir) / str(self.entity_type)

    def find_hook(self, action: str) -> Optional[Path]:
        hook = self.hook_dir / action
        if hook.is_file() and os.access(hook, os.X_OK):
            return hook
        return None

    def hook_env(self, row: TaskRow, action: str) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(
            {
                "TASK_ENTITY": str(self.entity_type),
                "TASK_ACTION": action,
                "TASK_ID": str(row.id),
                "TASK_NAME": row.name,
                "TASK_STATUS": row.status.value,
                "TASK_PARENT_ID": ""
                if row.parent_id is None
                else str(row.parent_id),
            }
        )
        return env

    def handle(self, row: TaskRow, action: str) -> Outcome:
        hook = self.find_hook(action)
        if hook is None:
            self.logger.debug(
                f"No '{action}' hook for {self.entity_type}; nothing to do for {row.name}"
            )
            return Success()

        result = run_command(
            [str(hook), str(row.id), row.name],
            self.settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
            env=self.hook_env(row, action),
        )
        if result.returncode != 0:
            message = (result.stderr or "").strip() or (
                f"Hook {hook} exited with status {result.returncode}"
            )
            return Failure(message)
        return Success()
