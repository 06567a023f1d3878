"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``. Applications (and the CLI)
call ``configure_logging`` once to route the package logger through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from pharma_kg.config import settings

PACKAGE_LOGGER = "pharma_kg"


def configure_logging(level: str | None = None, console: Console | None = None) -> logging.Logger:
    """
    Attach a RichHandler to the package logger.

    Safe to call repeatedly; the handler is installed once and only the level
    is updated afterwards.

    Args:
        level: Logging level name, defaults to settings.log_level
        console: Optional rich console (stderr by default)

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level or settings.log_level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
