from __future__ import annotations
import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """
    Route the 'cline' loggers to stderr through rich.
    WARNING by default, DEBUG with --debug. Does nothing if already configured unless force=True.
    """
    logger = logging.getLogger("cline")
    if logger.handlers and not force:
        logger.setLevel(logging.DEBUG if debug else logging.WARNING)
        return

    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
