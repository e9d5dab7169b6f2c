"""Logging setup."""

import logging

from rich.logging import RichHandler

PRODUCTION_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(development: bool = True) -> None:
    """Rich console logs at DEBUG in development, plain INFO lines otherwise."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if development:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(rich_tracebacks=True)],
        )
    else:
        logging.basicConfig(level=logging.INFO, format=PRODUCTION_FORMAT)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
