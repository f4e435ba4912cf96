import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: Optional[str] = None) -> None:
    """Configure global logging with colorized output.

    Idempotent: safe to call multiple times.
    Level can be overridden via param or env var MARKSTREAM_LOG_LEVEL.
    """
    root = logging.getLogger()
    if getattr(root, "_markstream_configured", False):
        return

    level_name = (level or os.getenv("MARKSTREAM_LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    # Remove default handlers if any basicConfig was called elsewhere
    for h in list(root.handlers):
        root.removeHandler(h)

    # stderr keeps stdout free for cleaned text piped out of the CLI
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_time=True, show_path=False, markup=True)
    logging.basicConfig(level=numeric_level, format="%(message)s", handlers=[handler])
    root._markstream_configured = True  # type: ignore[attr-defined]


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
