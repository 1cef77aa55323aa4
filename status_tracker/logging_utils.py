"""
Logging setup.

- Call `setup_logging(...)` once at startup.
- Get module loggers via `get_logger(__name__)`.
"""

import logging
import sys
from typing import Union

_CONFIGURED = False


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure the root logger with a single stderr handler. Safe to call twice."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
