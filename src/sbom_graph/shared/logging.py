"""
Logging setup for the SBOM graph engine.

Everything logs under the ``sbom_graph`` namespace. Analyses usually run on a
worker thread, so file logs carry the thread name.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "sbom_graph"

FILE_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO", log_file: Path | None = None, use_rich: bool = True
) -> logging.Logger:
    """Configure the ``sbom_graph`` logger.

    Calling this again replaces the previous handlers, so CLI invocations in
    one process do not stack duplicate output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that also receives every record
        use_rich: Render console records with Rich instead of plain text

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True), show_time=True, show_path=False, markup=False
        )
        console_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_phase(logger: logging.Logger, phase: str, level: int = logging.INFO) -> Iterator[None]:
    """Log how long an analysis phase took once it finishes.

    Nothing is logged when the phase raises; the exception already says why
    it stopped.
    """
    started = time.perf_counter()
    yield
    logger.log(level, f"{phase} finished in {time.perf_counter() - started:.2f}s")
