# provisioning/processor.py
# -*- coding: utf-8 -*-
"""
The task processor: one pass over the pipeline, run to completion.

For each phase the Pending-Work Query runs first. An empty result skips the
phase without touching its handler. Otherwise the handler is resolved once
and every row is dispatched and its outcome written before the next row is
looked at. A row-level failure is recorded on the row and the run goes on;
a category-level fault (``ProvisioningError``) aborts the run.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from common.core_utils import task_log_file, task_log_filename
from provisioning.context import ExecutionContext, RunContext
from provisioning.errors import (
    HandlerResolutionError,
    IpReconciliationError,
    ProvisioningError,
)
from provisioning.handlers.base import BatchTaskHandler, TaskHandler
from provisioning.models import Failure, Outcome, Success, TaskRow
from provisioning.phases import PIPELINE, Phase, PhaseKind
from provisioning.registry import HandlerRegistry


@dataclass
class PhaseReport:
    key: str
    entity_type: str
    selected: int = 0
    succeeded: int = 0
    failed: int = 0


@dataclass
class RunReport:
    mode: str
    phases: List[PhaseReport] = field(default_factory=list)
    ip_reconciled: bool = False

    @property
    def total_selected(self) -> int:
        return sum(p.selected for p in self.phases)

    @property
    def total_failed(self) -> int:
        return sum(p.failed for p in self.phases)

    def summary(self) -> str:
        return (
            f"{self.total_selected} task(s) processed, {self.total_failed} failed"
            f"{', IP addresses reconciled' if self.ip_reconciled else ''}"
        )


class TaskProcessor:
    """Walks the fixed pipeline once per ``run()``."""

    def __init__(
        self,
        run_context: RunContext,
        execution: ExecutionContext,
        registry: Optional[HandlerRegistry] = None,
        phases: Sequence[Phase] = PIPELINE,
    ):
        self.context = run_context
        self.execution = execution
        self.registry = registry or HandlerRegistry(run_context)
        self.phases = phases
        self.logger: logging.Logger = run_context.logger

    def run(self) -> RunReport:
        """
        Process every eligible task row.

        Returns:
            A report of what each phase did.

        Raises:
            ProvisioningError: A category-level fault aborted the run. Any
                other exception escaping a phase is wrapped into one. The
                execution context has already reported it.
        """
        report = RunReport(mode=self.execution.mode)
        ip_work = False
        current: Optional[str] = None
        self.logger.info(f"Processing database tasks ({report.mode} mode)")

        try:
            for phase in self.phases:
                current = phase.key
                started = time.monotonic()
                if phase.kind is PhaseKind.IP_RECONCILIATION:
                    if ip_work or self.execution.always_reconcile_ips:
                        self._reconcile_ips(phase)
                        report.ip_reconciled = True
                    continue

                phase_report = PhaseReport(phase.key, str(phase.entity_type))
                if phase.kind is PhaseKind.BATCH:
                    did_work = self._run_batch_phase(phase, phase_report)
                else:
                    did_work = self._run_row_phase(phase, phase_report)

                if phase_report.selected:
                    report.phases.append(phase_report)
                    self.context.metrics.record_phase_time(
                        phase.key, time.monotonic() - started
                    )
                if did_work and phase.ip_relevant:
                    ip_work = True
        except ProvisioningError as e:
            self._abort(e)
            raise
        except Exception as e:
            error = ProvisioningError(
                f"Unexpected failure in phase '{current}': {str(e) or type(e).__name__}",
                phase=current,
                original_error=e,
            )
            self._abort(error)
            raise error from e

        self.context.metrics.mark_run_finished()
        self.logger.info(f"Database tasks done: {report.summary()}")
        return report

    def _abort(self, error: ProvisioningError) -> None:
        self.context.metrics.record_abort(type(error).__name__)
        self.execution.report_fatal(error)

    def _run_row_phase(self, phase: Phase, phase_report: PhaseReport) -> bool:
        self.logger.debug(f"Processing {phase.entity_type} tasks ({phase.key})...")
        rows = self.context.store.fetch_pending(phase.query)
        if not rows:
            self.logger.debug(f"No task to process for {phase.key}")
            return False

        handler = self.registry.resolve(phase.entity_type)
        if not isinstance(handler, TaskHandler):
            raise_resolution_mismatch(phase, handler)

        total = len(rows)
        phase_report.selected = total
        for index, row in enumerate(rows, start=1):
            with task_log_file(
                self.context.settings.log_dir,
                task_log_filename(str(row.entity_type), row.name),
                self.logger,
            ):
                outcome = self.execution.run_step(
                    lambda row=row: self._dispatch(handler, row),
                    row.describe(),
                    index,
                    total,
                )
                self.context.status_writer.write(row, outcome)
            self.context.record_outcome(row, outcome)
            if isinstance(outcome, Failure):
                phase_report.failed += 1
            else:
                phase_report.succeeded += 1
        return True

    def _dispatch(self, handler: TaskHandler, row: TaskRow) -> Outcome:
        """Row-level fault boundary: nothing raised by a handler escapes."""
        try:
            outcome = handler.process(row)
        except Exception as e:
            self.logger.error(
                f"Handler for {row.entity_type} raised on {row.name} (ID {row.id}): {e}",
                exc_info=True,
            )
            return Failure(str(e) or type(e).__name__)
        if not isinstance(outcome, (Success, Failure)):
            return Failure(
                f"Handler for {row.entity_type} returned {outcome!r} instead of an outcome"
            )
        return outcome

    def _run_batch_phase(
        self, phase: Phase, phase_report: PhaseReport
    ) -> bool:
        self.logger.debug(f"Processing {phase.entity_type} tasks ({phase.key})...")
        if not self.context.store.fetch_pending(phase.query):
            self.logger.debug(f"No task to process for {phase.key}")
            return False

        handler = self.registry.resolve(phase.entity_type)
        if not isinstance(handler, BatchTaskHandler):
            raise_resolution_mismatch(phase, handler)

        phase_report.selected = 1
        with task_log_file(
            self.context.settings.log_dir,
            task_log_filename(phase.key),
            self.logger,
        ):
            try:
                did_work = self.execution.run_step(
                    handler.process_all, str(phase.entity_type), 1, 1
                )
            except ProvisioningError:
                raise
            except Exception as e:
                # Rows already handled by the batch have their outcome recorded.
                self.logger.error(
                    f"{phase.entity_type} batch failed: {e}", exc_info=True
                )
                phase_report.failed = 1
                return False
        phase_report.succeeded = 1
        return bool(did_work)

    def _reconcile_ips(self, phase: Phase) -> None:
        handler = self.registry.resolve(phase.entity_type)
        if not isinstance(handler, BatchTaskHandler):
            raise_resolution_mismatch(phase, handler)

        with task_log_file(
            self.context.settings.log_dir,
            task_log_filename(phase.key),
            self.logger,
        ):
            try:
                self.execution.run_step(
                    handler.process_all, "IP addresses", 1, 1
                )
            except ProvisioningError:
                raise
            except Exception as e:
                raise IpReconciliationError(
                    f"Could not process IP addresses: {str(e) or type(e).__name__}",
                    phase=phase.key,
                    original_error=e,
                ) from e


def raise_resolution_mismatch(phase: Phase, handler: object) -> None:
    raise HandlerResolutionError(
        f"Handler {type(handler).__name__} cannot serve {phase.kind.value} phase '{phase.key}'",
        phase=phase.key,
    )
