import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from dotconverge.constants import APP_NAME


LOG_LEVEL_ENV = "DOTCONVERGE_LOG_LEVEL"


def setup_logging(log_level: Optional[str] = None) -> None:
    """Route package logs to stderr through rich.

    Priority: argument > DOTCONVERGE_LOG_LEVEL > WARNING.
    """
    if log_level is None:
        log_level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    level = getattr(logging, log_level.upper(), logging.WARNING)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
