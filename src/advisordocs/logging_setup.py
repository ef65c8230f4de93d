"""Logging configuration for the advisordocs command line."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from advisordocs.config.models import LoggingSettings

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_MARKER = "_advisordocs_handler"


def configure_logging(settings: LoggingSettings, *, console: Console | None = None) -> None:
    """Attach advisordocs handlers to the package logger.

    Console output goes through rich on stderr. When ``settings.file`` is set a
    rotating file handler is added as well. Calling this again replaces the
    handlers installed by a previous call.
    """
    logger = logging.getLogger("advisordocs")
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARKER, False)]:
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handlers: list[logging.Handler] = [rich_handler]

    if settings.file:
        path = Path(settings.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)


__all__ = ["configure_logging"]
