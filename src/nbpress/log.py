"""Logging setup for the command line."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Route nbpress log records to a Rich handler.

    Args:
        verbose: Log at DEBUG instead of INFO
        console: Console the handler writes to

    Returns:
        logging.Logger: The configured ``nbpress`` logger
    """
    logger = logging.getLogger("nbpress")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
