"""Console logging setup shared by the service and the MCP entrypoint."""

from __future__ import annotations

import logging
import sys
from typing import Optional

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO", *, stream: Optional[object] = None) -> logging.Logger:
    """Configure the package logger once and return it.

    Handlers are attached to the ``blueprint_rag`` logger rather than the root
    logger so embedding applications keep control of their own output. MCP
    stdio transport owns stdout, so records go to stderr by default.
    """
    logger = logging.getLogger("blueprint_rag")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(getattr(h, "_blueprint_rag", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)  # type: ignore[arg-type]
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        handler._blueprint_rag = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False

    # Quiet chatty third-party loggers
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger
