from __future__ import annotations

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

# ------------- Logger configuravel
console = Console()
FORMAT = "%(message)s"
logger = logging.getLogger("udping")


def configure_logging(level: Union[int, str] = logging.WARNING) -> None:
    """Route the ``udping`` logger through a RichHandler on the shared console."""
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=True,
        show_time=False,
    )
    handler.setFormatter(logging.Formatter(FORMAT, datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
