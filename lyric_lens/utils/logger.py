"""
Logging for Lyric-Lens

Two audiences read the logs. The console shows what a user needs to see:
warnings, errors and messages explicitly marked for the user (source
failures land here). The optional rotating log file records everything at
the configured level with module and function names for troubleshooting.
``--verbose`` drops the console filter so every record is shown.
"""

import functools
import logging
import logging.handlers
import re
import sys
import time
from pathlib import Path
from typing import Optional

import colorama
from colorama import Back, Fore, Style

from ..config.settings import Settings, get_settings


colorama.init()

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Back.WHITE + Style.BRIGHT,
}

# HTTP and SDK loggers that would otherwise flood the console
EXTERNAL_LIBS = (
    'urllib3', 'urllib3.connectionpool', 'requests',
    'openai', 'httpx', 'httpcore', 'lyricsgenius',
)

FILE_FORMAT = '%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s'
VERBOSE_FORMAT = '%(levelname)s %(name)s: %(message)s'

_SIZE_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*([KMG]?B)')
_SIZE_UNITS = {'B': 0, 'KB': 1, 'MB': 2, 'GB': 3}


class ConsoleMessageFilter(logging.Filter):
    """Pass records meant for the user: WARNING and above, or flagged ones"""

    def __init__(self, threshold: int = logging.WARNING):
        super().__init__()
        self.threshold = threshold

    def filter(self, record):
        return record.levelno >= self.threshold or getattr(record, 'console_output', False)


class ColoredFormatter(logging.Formatter):
    """Formatter that paints each whole line in its level colour"""

    def __init__(self, fmt: str = '%(message)s', use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not (self.use_colors and color):
            return line
        return f"{color}{line}{Style.RESET_ALL}"


def parse_size(size_str: str) -> int:
    """
    Convert a size such as "10MB" or "500 kb" to bytes

    Raises:
        ValueError: If the string is not a number followed by B/KB/MB/GB
    """
    match = _SIZE_PATTERN.fullmatch(size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")
    number, unit = match.groups()
    return int(float(number) * 1024 ** _SIZE_UNITS[unit])


def _console_handler(level: int, colored: bool, verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if verbose:
        handler.setLevel(level)
        handler.setFormatter(ColoredFormatter(VERBOSE_FORMAT, use_colors=colored))
    else:
        handler.addFilter(ConsoleMessageFilter())
        handler.setFormatter(ColoredFormatter(use_colors=colored))
    return handler


def _file_handler(path: Path, level: int, max_size: str, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=parse_size(max_size),
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def _silence_external_libs() -> None:
    for name in EXTERNAL_LIBS:
        lib_logger = logging.getLogger(name)
        lib_logger.setLevel(logging.CRITICAL)
        lib_logger.propagate = False


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3,
    verbose: bool = False
) -> None:
    """
    Replace the root handlers with the console and file handlers

    Args:
        level: Level name applied to the file handler (and console when verbose)
        log_file: Log file path, None for console only
        console_output: Attach the console handler
        colored_output: Colour console lines by level
        max_size: Rotation threshold such as "10MB"
        backup_count: Rotated files to keep
        verbose: Show every record at ``level`` and above on the console
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    # Handlers do the filtering
    root.setLevel(logging.DEBUG)

    if console_output:
        root.addHandler(_console_handler(numeric_level, colored_output, verbose))
    if log_file:
        root.addHandler(_file_handler(Path(log_file), numeric_level, max_size, backup_count))

    _silence_external_libs()
    logging.getLogger('lyric_lens').debug(
        f"Logging ready (level={level}, console={console_output}, file={log_file or 'none'})"
    )


def get_current_log_file() -> Optional[Path]:
    """Path of the active rotating log file, if any"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Module logger with ``console_info``/``console_warning``/``console_error``

    ``console_info`` flags an INFO record so it passes the console filter.
    """
    logger = logging.getLogger(name)
    logger.console_info = functools.partial(logger.info, extra={'console_output': True})
    logger.console_warning = logger.warning
    logger.console_error = logger.error
    return logger


def _log_file_path(settings: Settings) -> Optional[Path]:
    if not settings.logging.file:
        return None
    path = Path(settings.logging.file).expanduser()
    if path.is_absolute():
        return path
    return settings.get_config_directory() / path


def configure_from_settings(verbose: bool = False) -> None:
    """
    Configure logging from the ``logging`` settings section

    Args:
        verbose: Force DEBUG and always enable the console
    """
    settings = get_settings()
    log_path = _log_file_path(settings)

    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=str(log_path) if log_path else None,
        console_output=settings.logging.console_output or verbose,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count,
        verbose=verbose
    )


class OperationLogger:
    """Start/progress/complete/error records for one named pipeline run"""

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.started_at: Optional[float] = None

    def _elapsed(self) -> str:
        if self.started_at is None:
            return ""
        return f" in {time.perf_counter() - self.started_at:.2f}s"

    def start(self, message: Optional[str] = None) -> None:
        self.started_at = time.perf_counter()
        self.logger.info(message or f"Operation started: {self.operation_name}")

    def progress(self, message: str) -> None:
        self.logger.info(f"{self.operation_name}: {message}")

    def complete(self, message: Optional[str] = None) -> None:
        """Record completion; ``message`` is also shown to the user"""
        self.logger.info(f"Operation completed: {self.operation_name}{self._elapsed()}")
        if message:
            self.logger.info(message, extra={'console_output': True})

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        self.logger.error(
            f"Operation failed: {self.operation_name}{self._elapsed()} - {message}",
            exc_info=exception
        )


def create_operation_logger(name: str, operation: str) -> OperationLogger:
    return OperationLogger(get_logger(name), operation)


def log_performance(func):
    """Log how long ``func`` took (DEBUG, file only)"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        started = time.perf_counter()
        outcome = "failed"
        try:
            result = func(*args, **kwargs)
            outcome = "completed"
            return result
        finally:
            logger.debug(f"{func.__qualname__} {outcome} in {time.perf_counter() - started:.3f}s")

    return wrapper
