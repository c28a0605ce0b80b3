"""
Logging utility for selfupdate.

Every run writes its diagnostics to a dedicated log file so that stdout stays
clean for scripts consuming the check result.
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

# --- Global Log Settings (Defaults, can be overridden by Config) ---
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(levelname)-8s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TAIL_LINES = 20


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    log_to_console: bool = False,
):
    """
    Configures root logging with a file handler and optional console handler.

    The console handler writes to stderr. When no log file is given the console
    handler is always installed so that nothing is silently dropped.
    """
    log_level_upper = level.upper()
    numeric_level = getattr(logging, log_level_upper, logging.INFO)
    formatter = logging.Formatter(log_format, date_format)
    root_logger = logging.getLogger()

    root_logger.setLevel(numeric_level)
    _remove_handlers(root_logger)

    if log_file:
        log_file_path = Path(log_file)
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(
                f"ERROR: Failed to set up file logging for {log_file_path}: {e}",
                file=sys.stderr,
            )
            log_to_console = True

    if log_to_console or not log_file:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    noisy_libraries = {
        "urllib3.connectionpool": logging.WARNING,
        "aiohttp": logging.WARNING,
        "asyncio": logging.WARNING,
    }
    for lib_name, lib_level in noisy_libraries.items():
        logging.getLogger(lib_name).setLevel(lib_level)

    logging.getLogger(__name__).info(
        "-" * 20 + " Logging System Initialized " + "-" * 20
    )
    logging.getLogger(__name__).info(
        f"Python Version: {sys.version.split()[0]}, Platform: {sys.platform}"
    )


def shutdown_logging():
    """Flush, close and detach every root handler installed by setup_logging."""
    _remove_handlers(logging.getLogger())


def _remove_handlers(root_logger: logging.Logger):
    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Returns a logger instance with the specified name.

    Unlike setup_logging this never touches handlers; records emitted before
    the run context configures logging propagate to whatever the host set up.
    """
    return logging.getLogger(name)


def get_recent_logs(
    num_lines: int = DEFAULT_TAIL_LINES, log_file_path: Optional[str] = None
) -> List[str]:
    """
    Retrieves the last N lines from the log file.
    Uses the currently configured file handler if no path is provided.
    """
    if log_file_path is None:
        log_file_path = get_log_file_path()
        if log_file_path is None:
            return ["No log file configured"]

    actual_log_file = Path(log_file_path)
    if not actual_log_file.exists():
        return [f"Log file not found: {actual_log_file}"]

    try:
        with open(actual_log_file, "r", encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
            if num_lines <= 0:
                return []
            return [line.rstrip("\n") for line in lines[-num_lines:]]
    except OSError as e:
        return [f"Error reading log file {actual_log_file}: {e}"]


def get_log_file_path() -> Optional[str]:
    """Returns the absolute path to the currently configured log file, if any."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return None
