# common/core_utils.py
# -*- coding: utf-8 -*-
"""
Core utility functions for the project.

This module provides helper functions for:
- Logging setup with level symbols and an optional prefix.
- Per-task log files attached for the duration of one unit of work.
"""

import logging
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from settings.config_models import SYMBOLS_DEFAULT

module_logger = logging.getLogger(__name__)

DETAILED_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"
SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER = "{log_prefix}%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
SIMPLE_LOG_FORMAT_NO_PREFIX = (
    "%(asctime)s - %(levelname)s - %(symbol)s %(name)s - %(message)s"
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.@-]+")


class SymbolFormatter(logging.Formatter):
    """
    A custom formatter that adds symbols to log messages based on the log level.
    """

    def __init__(
        self, fmt=None, datefmt=None, style="%", validate=True, symbols=None
    ):
        super().__init__(fmt, datefmt, style, validate)
        self.symbols = symbols or SYMBOLS_DEFAULT

    def format(self, record):
        if record.levelno == logging.DEBUG:
            record.symbol = self.symbols.get("debug", "🐛")
        elif record.levelno == logging.INFO:
            record.symbol = self.symbols.get("info", "ℹ️")
        elif record.levelno == logging.WARNING:
            record.symbol = self.symbols.get("warning", "⚠️")
        elif record.levelno == logging.ERROR:
            record.symbol = self.symbols.get("error", "❌")
        elif record.levelno == logging.CRITICAL:
            record.symbol = self.symbols.get("critical", "🔥")
        else:
            record.symbol = ""

        return super().format(record)


def resolve_log_format(
    log_format_str: Optional[str] = None, log_prefix: Optional[str] = None
) -> str:
    """
    Pick the console format. ``{log_prefix}`` in a custom format marks
    where the prefix goes; otherwise the prefix leads the line.
    """
    prefix = f"{log_prefix.strip()} " if log_prefix and log_prefix.strip() else ""
    if not log_format_str:
        if not prefix:
            return SIMPLE_LOG_FORMAT_NO_PREFIX
        log_format_str = SIMPLE_LOG_FORMAT_WITH_PREFIX_PLACEHOLDER
    if "{log_prefix}" in log_format_str:
        return log_format_str.format(log_prefix=prefix)
    return prefix + log_format_str


def setup_logging(
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
    log_format_str: Optional[str] = None,
    log_prefix: Optional[str] = None,
    symbols: Optional[Dict[str, str]] = None,
) -> None:
    """
    Configure the root logger for an engine run.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Args:
        log_level: Root log level.
        log_file: Also append records to this file (parent directories are
            created). A file that cannot be opened only produces a warning
            on stderr.
        log_to_console: Write records to stdout.
        log_format_str: Custom format, see ``resolve_log_format``.
        log_prefix: Text put in front of every line, e.g. ``[ENGINE]``.
        symbols: Level symbols for ``SymbolFormatter``.
    """
    handlers: List[logging.Handler] = []
    if log_file:
        try:
            log_file_path = Path(log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file_path, mode="a"))
        except Exception as e:
            print(
                f"Warning: Could not create file handler for log file {log_file}: {e}",
                file=sys.stderr,
            )

    if log_to_console or not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    final_format_str = resolve_log_format(log_format_str, log_prefix)
    formatter = SymbolFormatter(
        fmt=final_format_str,
        datefmt="%Y-%m-%d %H:%M:%S",
        symbols=symbols,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    module_logger.debug(
        f"Logging configured. Level: {logging.getLevelName(log_level)}. Format: '{final_format_str}'"
    )


def task_log_filename(*parts: str) -> str:
    """Build a filesystem-safe log file name from entity/task labels."""
    joined = "_".join(p for p in parts if p)
    safe = _UNSAFE_FILENAME_CHARS.sub("-", joined).strip("-.")
    return f"{safe or 'task'}.log"


@contextmanager
def task_log_file(
    log_dir: Optional[Path],
    filename: str,
    logger: Optional[logging.Logger] = None,
) -> Iterator[Optional[Path]]:
    """
    Mirror every record emitted while the block runs into a dedicated file.

    The handler is attached to the root logger so records from handlers and
    command helpers land in the file too. Nothing happens when ``log_dir``
    is None.

    Yields:
        The path of the task log file, or None when disabled.
    """
    if log_dir is None:
        yield None
        return

    log_path = Path(log_dir) / filename
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(DETAILED_LOG_FORMAT))
    handler.setLevel(logging.DEBUG)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    (logger or module_logger).debug(f"Task log opened: {log_path}")
    try:
        yield log_path
    finally:
        root_logger.removeHandler(handler)
        handler.close()
