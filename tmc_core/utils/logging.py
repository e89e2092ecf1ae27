"""
Console logging setup for applications embedding the core.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | int = "INFO", console: Console | None = None) -> logging.Logger:
    """
    Attaches a RichHandler to the ``tmc_core`` logger. Calling it again only
    changes the level.
    """
    log = logging.getLogger("tmc_core")
    log.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in log.handlers):
        log.addHandler(
            RichHandler(
                console=console or Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
                show_level=False,
                markup=True,
            )
        )
    return log
