"""Logging setup shared by the CLI, the service and the core modules.

Modules obtain their logger with ``get_logger(__name__)``; the entry points
call ``setup_logging`` once to attach a rich handler to the package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "crd_typegen"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package hierarchy."""
    return logging.getLogger(name)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr rich handler to the package logger.

    Args:
        verbose: Log at DEBUG instead of INFO.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=verbose,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
