#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for the provisioning engine.

Runs the database task processor once. Headless by default (suitable for
cron or a daemon wake-up); ``--setup`` runs interactively with per-task
progress, as during panel installation or upgrade.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import psycopg

from common.core_utils import setup_logging
from common.db_utils import get_db_connection
from common.metrics import EngineMetrics
from provisioning.context import HeadlessContext, InteractiveContext, RunContext
from provisioning.errors import ProvisioningError
from provisioning.processor import TaskProcessor
from provisioning.store import PostgresTaskStore
from settings.config_loader import load_app_settings

ENGINE_LOG_FILE = "engine.log"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Process pending provisioning tasks from the panel database.",
    )
    parser.add_argument(
        "-c", "--config", help="Path to the YAML configuration file."
    )
    parser.add_argument(
        "--setup",
        action="store_true",
        default=None,
        help="Interactive setup run: show progress and always reconcile IP addresses.",
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=None, help="Debug logging."
    )
    parser.add_argument("--log-dir", type=Path, help="Directory for task logs.")
    parser.add_argument("--hooks-dir", type=Path, help="Provisioning hooks directory.")
    parser.add_argument(
        "--metrics-textfile",
        type=Path,
        help="Write Prometheus metrics to this file after the run.",
    )
    parser.add_argument("--db-host", help="Database host.")
    parser.add_argument("--db-port", type=int, help="Database port.")
    parser.add_argument("--db-name", help="Database name.")
    parser.add_argument("--db-user", help="Database user.")
    parser.add_argument("--db-password", help="Database password.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app_settings = load_app_settings(args)

    setup_logging(
        log_level=logging.DEBUG if app_settings.debug else logging.INFO,
        log_file=str(app_settings.log_dir / ENGINE_LOG_FILE)
        if app_settings.log_dir
        else None,
        log_prefix=app_settings.log_prefix,
        symbols=app_settings.symbols,
    )
    logger = logging.getLogger("provisioning")

    if app_settings.mode == "setup":
        execution = InteractiveContext(app_settings, logger=logger)
    else:
        execution = HeadlessContext(logger)

    try:
        conn = get_db_connection(app_settings.db, logger)
    except psycopg.Error as e:
        execution.report_fatal(e)
        return 1

    metrics = EngineMetrics()
    exit_code = 0
    with conn:
        run_context = RunContext(
            settings=app_settings,
            store=PostgresTaskStore(conn, logger),
            logger=logger,
            metrics=metrics,
        )
        try:
            report = TaskProcessor(run_context, execution).run()
        except ProvisioningError:
            exit_code = 1
        else:
            if app_settings.mode == "setup":
                print(report.summary())

    if app_settings.metrics_textfile:
        metrics.write_textfile(app_settings.metrics_textfile)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
