from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "smartmorph"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``smartmorph`` logger with a rich console handler.

    Existing handlers are cleared so repeated CLI invocations (or watch-mode
    rebuilds) do not duplicate output.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
        )
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
