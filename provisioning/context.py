# provisioning/context.py
# -*- coding: utf-8 -*-
"""
Run context and execution contexts.

``RunContext`` carries everything a run needs (settings, logger, store,
status writer, metrics) and is handed explicitly to the processor and to
every handler.

An execution context decides how a run talks to its operator: headless
runs (cron, daemon wake-ups) only log; interactive setup runs print each
task as a numbered step within its phase.
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO, TypeVar

from common.command_utils import get_symbols
from common.metrics import EngineMetrics
from provisioning.models import Failure, Outcome, TaskRow
from provisioning.status_writer import StatusWriter
from provisioning.store import TaskStore
from settings.config_models import AppSettings

T = TypeVar("T")


@dataclass
class RunContext:
    settings: AppSettings
    store: TaskStore
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("provisioning")
    )
    metrics: EngineMetrics = field(default_factory=EngineMetrics)
    status_writer: Optional[StatusWriter] = None

    def __post_init__(self):
        if self.status_writer is None:
            self.status_writer = StatusWriter(self.store, self.logger)

    def record_outcome(self, row: TaskRow, outcome: Outcome) -> None:
        self.metrics.record_task(
            str(row.entity_type),
            "failure" if isinstance(outcome, Failure) else "success",
        )


class ExecutionContext(ABC):
    """How a run reports progress and fatal errors."""

    mode: str = ""
    # Interactive setup always rebuilds IP configuration once.
    always_reconcile_ips: bool = False

    @abstractmethod
    def run_step(
        self, func: Callable[[], T], message: str, index: int, total: int
    ) -> T:
        """Run one unit of work (a row or a batch call) and return its result."""

    @abstractmethod
    def report_fatal(self, error: BaseException) -> None:
        """Surface an error that aborted the run."""


class HeadlessContext(ExecutionContext):
    mode = "backend"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def run_step(
        self, func: Callable[[], T], message: str, index: int, total: int
    ) -> T:
        self.logger.debug(f"Processing {message}")
        return func()

    def report_fatal(self, error: BaseException) -> None:
        self.logger.critical(f"Run aborted: {error}")


class InteractiveContext(ExecutionContext):
    mode = "setup"
    always_reconcile_ips = True

    def __init__(
        self,
        app_settings: Optional[AppSettings] = None,
        stream: Optional[TextIO] = None,
        err_stream: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.symbols = get_symbols(app_settings)
        self.stream = stream or sys.stdout
        self.err_stream = err_stream or sys.stderr
        self.logger = logger or logging.getLogger(__name__)

    def run_step(
        self, func: Callable[[], T], message: str, index: int, total: int
    ) -> T:
        print(
            f"{self.symbols.get('step', '➡️')} [{index}/{total}] Processing {message}",
            file=self.stream,
            flush=True,
        )
        result = func()
        if isinstance(result, Failure):
            print(
                f"   {self.symbols.get('error', '❌')} {result.message}",
                file=self.stream,
                flush=True,
            )
        return result

    def report_fatal(self, error: BaseException) -> None:
        self.logger.critical(f"Run aborted: {error}")
        print(
            f"{self.symbols.get('critical', '🔥')} {error}",
            file=self.err_stream,
            flush=True,
        )
