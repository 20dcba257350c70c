"""Console and rotating-file logging for the Flask app."""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from pathlib import Path

from flask import Flask

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(parent_file)s:%(lineno)-3d | %(message)s"


class ShortPathFilter(logging.Filter):
    """Tag records with ``parent_file`` (e.g. ``services/game.py``)."""

    def filter(self, record) -> bool:
        path = Path(record.pathname)
        record.parent_file = f"{path.parent.name}/{path.name}"
        return True


def configure_app_logging(app: Flask) -> None:
    """Route the root logger to the console and, when ``LOG_FILE`` is set, a rotating file."""
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler_defaults = {"formatter": "default", "level": level, "filters": ["short_path"]}
    handlers = {}
    if app.config.get("LOG_IN_TERMINAL", True):
        handlers["console"] = {"class": "logging.StreamHandler", **handler_defaults}

    log_file = app.config.get("LOG_FILE")
    if log_file:
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(log_dir, Path(log_file).with_suffix(".log")),
            "maxBytes": int(app.config.get("LOG_MAX_BYTES", 10 * 1024 * 1024)),
            "backupCount": int(app.config.get("LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            **handler_defaults,
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"short_path": {"()": ShortPathFilter}},
            "formatters": {"default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"}},
            "handlers": handlers,
            "root": {"handlers": list(handlers), "level": level},
        }
    )

    # Reduce noisy request logs (dev server)
    logging.getLogger("werkzeug").setLevel(app.config.get("WERKZEUG_LOG_LEVEL", "INFO"))

    app.logger.setLevel(level)
    app.logger.debug("Logging configured for level %s", level_name)


__all__ = ["configure_app_logging", "ShortPathFilter"]
