"""
Logging setup for the CLI
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Route library loggers through rich; safe to call more than once."""
    package_logger = logging.getLogger("postshards")
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
