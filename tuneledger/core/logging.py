"""Console logging setup shared by the API process and the maintenance scripts."""

from __future__ import annotations

import logging
import sys

from tuneledger.core.config import Settings

_HANDLER_NAME = "tuneledger-console"


def configure_logging(settings: Settings) -> None:
    """Install the console handler on the ``tuneledger`` logger once.

    Calling this again only updates the level, so app factories and tests can
    call it freely.
    """
    root = logging.getLogger("tuneledger")
    level = logging.getLevelName(settings.logging.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(logging.DEBUG if settings.debug else level)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(settings.logging.format, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


__all__ = ["configure_logging"]
