"""Loggers for the listings API and its geocoding sweeps.

Everything logs under the ``immo`` namespace; modules take a child logger
(``immo.services.geocoding``, ``immo.db.repo``...) and emit ``event key=value``
messages such as ``geocode_429 query='...' attempt=2 wait=4.0``.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(namespace: str = "immo") -> logging.Logger:
    """Attach one stream handler to the ``immo`` logger, honouring ``LOG_LEVEL``.

    Propagation is off so uvicorn's root handlers do not print geocoding
    and store events twice.
    """

    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger.addHandler(handler)
    logger.setLevel(_LOG_LEVEL)
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Module logger, e.g. ``get_logger("services.search")`` -> ``immo.services.search``."""

    base = configure_logging()
    if child:
        return base.getChild(child)
    return base
