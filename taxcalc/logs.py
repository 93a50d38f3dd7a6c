from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "taxcalc"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(LOGGER_NAME)
    return base.getChild(name) if name else base


def configure_logging(level: str | int = "WARNING", log_file: str | Path | None = None) -> list[logging.Handler]:
    """Attach stream (and optional file) handlers to the ``taxcalc`` logger.

    Handlers installed by a previous call are replaced so repeated CLI runs in
    one process do not duplicate output.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    for handler in list(logger.handlers):
        if getattr(handler, "_taxcalc_owned", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Unable to create log directory %s: %s", path.parent, exc)
        else:
            handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._taxcalc_owned = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)
    return handlers


__all__ = ["LOGGER_NAME", "LOG_FORMAT", "get_logger", "configure_logging"]
