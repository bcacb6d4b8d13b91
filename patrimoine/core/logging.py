"""Logging configuration for patrimoine.

Structured logging with structlog over the standard library handlers:
plain console lines by default, JSON lines when `json_logs` is set, and an
optional rotating log file. Monte-Carlo trials bind their run number and
seed with `trial_context` so every event of a trial can be traced back to it.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import structlog

LOG_FILE_NAME = "patrimoine.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_configured: bool = False


def _handlers(log_file: Optional[Path]) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    str(log_file), maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
                )
            )
        except OSError as e:
            sys.stderr.write(f"log file {log_file} disabled: {e}\n")
    return handlers


def _processors(json_output: bool) -> list[Any]:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def configure_logging(
    level: str | None = None,
    json_output: bool = False,
    log_file: Optional[Path] = None,
    force: bool = False,
) -> structlog.BoundLogger:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env
            LOGLEVEL, then INFO.
        json_output: Render JSON lines instead of console lines.
        log_file: Also write to this rotating file.
        force: Reconfigure even if logging is already configured.

    Returns:
        Configured logger instance.
    """
    global _configured

    if _configured and not force:
        return structlog.get_logger()

    log_level = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level, logging.INFO),
        handlers=_handlers(log_file),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def configure_from_settings(force: bool = False) -> structlog.BoundLogger:
    """Configure logging from `AppSettings` (PATRIMOINE_LOG_* variables)."""
    from patrimoine.core.settings import get_settings

    settings = get_settings()
    log_file = Path(settings.log_dir) / LOG_FILE_NAME if settings.log_to_file else None
    return configure_logging(
        level=settings.log_level,
        json_output=settings.json_logs,
        log_file=log_file,
        force=force,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, optionally bound to a module name.

    Logging is configured from the settings on first call.
    """
    if not _configured:
        configure_from_settings()

    logger = structlog.get_logger()
    if name:
        return logger.bind(logger_name=name)
    return logger


@contextmanager
def trial_context(run: int, seed: int) -> Iterator[None]:
    """Bind the trial's run number and seed to every event logged inside."""
    with structlog.contextvars.bound_contextvars(run=run, seed=seed):
        yield
