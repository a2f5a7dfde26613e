"""Logging setup for command-line use."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "aicr"


def setup_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
  """Attach a rich stderr handler to the package logger.

  Safe to call more than once; the handler is only added the first time.
  """
  logger = logging.getLogger(LOGGER_NAME)
  logger.setLevel(logging.DEBUG if debug else logging.WARNING)

  if not any(isinstance(h, RichHandler) for h in logger.handlers):
    handler = RichHandler(
      console=console or Console(stderr=True),
      show_path=debug,
      rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
  return logger
