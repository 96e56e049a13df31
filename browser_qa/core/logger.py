"""
Logging setup: stdlib logging rendered through Rich on the console.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .settings import get_settings


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Install a single RichHandler on the root logger.

    Args:
        level: Logging level name (defaults to settings.log_level)

    Returns:
        Root logger instance
    """
    name = (level or get_settings().log_level).upper()
    numeric_level = getattr(logging, name, logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
    handler.setLevel(numeric_level)
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    # driver chatter
    logging.getLogger("selenium").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return root_logger
