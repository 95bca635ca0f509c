"""Logging setup for the check-in backend, applied once at startup."""

import logging
import os

from checkin_backend.core.config import TEST_MODE

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging() -> logging.Logger:
    """
    Level: CHECKIN_LOG_LEVEL, else DEBUG in test mode, else INFO.
    uvicorn's loggers follow the same level.
    """
    resolved = os.getenv("CHECKIN_LOG_LEVEL") or ("DEBUG" if TEST_MODE else "INFO")
    resolved = resolved.upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    for name in ("checkin_backend", "uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(resolved)

    app_logger = logging.getLogger("checkin_backend")
    app_logger.debug("Logging configured at %s", resolved)
    return app_logger
