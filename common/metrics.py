"""
Prometheus metrics collection for the provisioning engine.

The engine runs to completion once per invocation, so metrics live in a
private registry that the CLI writes out in node-exporter textfile format
after each run.
"""

import logging
from pathlib import Path
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

logger = logging.getLogger(__name__)


class EngineMetrics:
    """Metrics for one engine run."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics collectors.

        Args:
            registry: Optional custom registry. A fresh one is created if None.
        """
        self.registry = registry or CollectorRegistry()

        self.tasks_processed = Counter(
            "provisioning_tasks_processed_total",
            "Task rows dispatched to a handler",
            ["entity_type", "outcome"],
            registry=self.registry,
        )

        self.phase_duration = Histogram(
            "provisioning_phase_duration_seconds",
            "Time spent in one pipeline phase",
            ["phase"],
            registry=self.registry,
        )

        self.runs_aborted = Counter(
            "provisioning_runs_aborted_total",
            "Runs aborted by a category-level fault",
            ["error_type"],
            registry=self.registry,
        )

        self.last_run_timestamp = Gauge(
            "provisioning_last_run_timestamp_seconds",
            "Completion time of the last run",
            registry=self.registry,
        )

    def record_task(self, entity_type: str, outcome: str):
        """Record one processed task row."""
        self.tasks_processed.labels(
            entity_type=entity_type, outcome=outcome
        ).inc()

    def record_phase_time(self, phase: str, duration: float):
        """Record the wall time of a phase."""
        self.phase_duration.labels(phase=phase).observe(duration)

    def record_abort(self, error_type: str):
        """Record a run aborted by a category-level fault."""
        self.runs_aborted.labels(error_type=error_type).inc()

    def mark_run_finished(self):
        self.last_run_timestamp.set_to_current_time()

    def write_textfile(self, path: Path) -> None:
        """Write the registry to ``path`` for the textfile collector."""
        try:
            write_to_textfile(str(path), self.registry)
            logger.debug(f"Metrics written to {path}")
        except OSError as e:
            logger.warning(f"Could not write metrics to {path}: {e}")
