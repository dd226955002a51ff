# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing commands and logging their output.
"""

import logging
import os
import shutil
import subprocess
from typing import Dict, List, Optional, Sequence

from settings.config_models import SYMBOLS_DEFAULT, AppSettings

module_logger = logging.getLogger(__name__)


def log_engine(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a message at a named level. "success" is logged at INFO.

    Args:
        message (str): The log message to be recorded.
        level (str): One of "debug", "info", "success", "warning", "error", "critical".
        current_logger (Optional[logging.Logger]): Logger to use; defaults to the module logger.
        exc_info (bool): Include exception details in the record.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def get_symbols(app_settings: Optional[AppSettings]) -> Dict[str, str]:
    return (
        app_settings.symbols
        if app_settings and app_settings.symbols
        else SYMBOLS_DEFAULT
    )


def _get_elevated_command_prefix() -> List[str]:
    """
    Returns ["sudo"] when the process is not running as root, else [].
    """
    return [] if os.geteuid() == 0 else ["sudo"]


def run_command(
    command: Sequence[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Run a command, logging it and (when captured) its output at debug level.

    Args:
        command: Argument list; never passed through a shell.
        app_settings: Engine settings, used for log symbols.
        check: Raise CalledProcessError on a non-zero exit status.
        capture_output: Capture stdout and stderr.
        text: Decode output as text.
        cmd_input: Data written to the command's standard input.
        current_logger: Logger for command details.
        cwd: Working directory.
        env: Complete environment for the command.

    Returns:
        subprocess.CompletedProcess: The finished process.

    Raises:
        subprocess.CalledProcessError: Non-zero exit status while ``check`` is True.
        FileNotFoundError: The executable does not exist.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    to_run = list(command)
    printable = subprocess.list2cmdline(to_run)

    log_engine(
        f"{symbols.get('gear', '⚙️')} Executing: {printable}{f' (in {cwd})' if cwd else ''}",
        "debug",
        logger_to_use,
    )
    try:
        result = subprocess.run(
            to_run,
            check=check,
            capture_output=capture_output,
            text=text,
            input=cmd_input,
            cwd=cwd,
            env=env,
        )
    except subprocess.CalledProcessError as e:
        log_engine(
            f"{symbols.get('error', '❌')} Command `{printable}` failed (rc {e.returncode}).",
            "error",
            logger_to_use,
        )
        if e.stderr and hasattr(e.stderr, "strip") and e.stderr.strip():
            log_engine(f"   stderr: {e.stderr.strip()}", "error", logger_to_use)
        raise
    except FileNotFoundError as e:
        log_engine(
            f"{symbols.get('error', '❌')} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            logger_to_use,
        )
        raise

    if capture_output:
        for stream_name in ("stdout", "stderr"):
            output = getattr(result, stream_name)
            if output and output.strip():
                log_engine(
                    f"   {stream_name}: {output.strip()}", "debug", logger_to_use
                )
    return result


def run_elevated_command(
    command: Sequence[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    cmd_input: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a command through sudo unless the process already runs as root.

    See run_command for the meaning of the arguments.
    """
    prefix = _get_elevated_command_prefix()
    return run_command(
        prefix + list(command),
        app_settings,
        check=check,
        capture_output=capture_output,
        text=True,
        cmd_input=cmd_input,
        current_logger=current_logger,
    )


def command_exists(command_name: str) -> bool:
    """Check if a command exists in the system's PATH."""
    return shutil.which(command_name) is not None
