"""Logging configuration for branch-health"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that flood DEBUG output with HTTP and subprocess chatter
_LIBRARY_LOGGERS = ('github', 'git', 'urllib3')


def get_log_file() -> Path:
    """Location of the debug log written with --debug."""
    return Path.home() / '.branch-health' / 'branch-health.log'


def setup_logging(verbose: bool = False, debug: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Route all log records to stderr through rich, and to a file when debugging.

    Levels: WARNING by default, INFO with verbose, DEBUG with debug.

    Args:
        verbose: Show INFO messages
        debug: Show DEBUG messages and keep a copy in the debug log file
        log_file: Debug log location (defaults to get_log_file())
    """
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    # stdout carries the report summary, so logs go to stderr
    stderr_handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=debug,
        show_path=debug,
        markup=False,
        rich_tracebacks=debug,
    )
    stderr_handler.setFormatter(logging.Formatter('[%(name)s] %(message)s'))
    root_logger.addHandler(stderr_handler)

    if debug:
        path = log_file or get_log_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s %(levelname)-8s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        root_logger.addHandler(file_handler)

    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, named without the package path (git_service, config...)."""
    for prefix in ('branch_health.', 'services.'):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
