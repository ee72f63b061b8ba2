"""Console logging for the ``fig`` command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_configured = False


def setup_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route ``figconf`` log records to a rich console handler.

    Only the first call installs the handler; later calls adjust the level.
    """
    global _configured
    logger = logging.getLogger("figconf")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _configured:
        return
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True
