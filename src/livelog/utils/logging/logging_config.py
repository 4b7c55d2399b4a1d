"""
Centralized logging configuration.

The fullscreen writer owns the terminal, so diagnostic logs never go to
stdout/stderr while it runs: they go to a file when one is given and are
discarded otherwise.
"""

import logging
import warnings
from pathlib import Path
from typing import Optional, Union


NOISY_LIBRARIES = [
    "asyncio",
    "urllib3",
    "prompt_toolkit",
    "markdown_it",
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class NullHandler(logging.Handler):
    """Handler that discards all log records."""

    def emit(self, record):
        pass


def setup_logging(verbose: bool = False, log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Configure the root logger and silence verbose third-party libraries.

    Args:
        verbose: If True, log livelog internals at DEBUG level. Otherwise WARNING.
        log_file: Append log records to this file. Records are dropped when unset.
    """
    if not verbose:
        warnings.filterwarnings("ignore")

    for logger_name in NOISY_LIBRARIES:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.CRITICAL)
        logger.propagate = False
        logger.handlers = [NullHandler()]

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = NullHandler()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
