from __future__ import annotations

import logging
import sys

from expander.config import settings


_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Route the service loggers to stdout at the configured level."""
    root = logging.getLogger("expander")
    root.setLevel((level or settings.log_level).upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    return root
