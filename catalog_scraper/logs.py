"""
Two-channel logging for the scraper.

The application channel records actions and processed files, the error
channel records everything that went wrong. Both are plain ``logging``
loggers created once at startup and handed to every component.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


LOG_NAME = "catalog_scraper"
APPLICATION_LOGGER = f"{LOG_NAME}.application"
ERROR_LOGGER = f"{LOG_NAME}.error"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_FILES = {
    "application_log": "application.log",
    "error_log": "error.log",
}


@dataclass(frozen=True)
class LoggingContext:
    app: logging.Logger
    error: logging.Logger

    @classmethod
    def default(cls) -> "LoggingContext":
        """Loggers without handlers of their own; records propagate to the root logger."""
        return cls(
            app=logging.getLogger(APPLICATION_LOGGER),
            error=logging.getLogger(ERROR_LOGGER),
        )

    def close(self) -> None:
        for logger in (self.app, self.error):
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()


def _to_level(value: Any, default: int = logging.DEBUG) -> int:
    if isinstance(value, int):
        return value
    return getattr(logging, str(value or "").upper(), default)


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    return handler


def init_logging(config: Optional[Dict[str, Any]] = None) -> LoggingContext:
    """Install file handlers for both channels from a ``logging`` config section.

    Accepts either the section itself (``{"directory": ..., "level": ...}``)
    or the contents of ``logging.yaml`` which nests it under ``logging``.
    """
    node = config or {}
    if isinstance(node.get("logging"), dict):
        node = node["logging"]

    directory = Path(node.get("directory") or "logs")
    level = _to_level(node.get("level"))
    files = {**DEFAULT_FILES, **(node.get("files") or {})}

    directory.mkdir(parents=True, exist_ok=True)

    context = LoggingContext.default()
    context.close()
    for logger, key in ((context.app, "application_log"), (context.error, "error_log")):
        logger.setLevel(level)
        logger.addHandler(_file_handler(directory / files[key], level))

    context.app.info("Logging initialized: directory=%s level=%s", directory, logging.getLevelName(level))
    return context
