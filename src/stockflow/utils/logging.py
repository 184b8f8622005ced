"""Logging for stockflow.

structlog on top of the standard library. The stdlib root logger owns the
handlers (stdout plus rotating ``stockflow.log`` and ``stockflow_error.log``
files); structlog renders JSON in production and staging and a rich console
view everywhere else.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

JSON_ENVIRONMENTS = ("production", "staging")

LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

QUIET_LOGGERS = ("protean", "urllib3", "asyncio", "httpx")


def current_environment() -> str:
    for var in ("ENV", "ENVIRONMENT", "PROTEAN_ENV"):
        if os.getenv(var):
            return os.environ[var].lower()
    return "development"


def log_level() -> str:
    """``LOG_LEVEL`` if set, else the default for the current environment."""
    return os.getenv("LOG_LEVEL", LEVELS.get(current_environment(), "INFO"))


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _install_handlers(level: str, log_dir: str) -> None:
    directory = Path(log_dir)
    directory.mkdir(exist_ok=True)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        stdout,
        _rotating_file(directory / "stockflow.log", level),
        _rotating_file(directory / "stockflow_error.log", logging.ERROR),
    ]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(environment: str):
    if environment in JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=3),
    )


def _install_structlog(environment: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(environment),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | None = None, log_dir: str = "logs") -> None:
    environment = current_environment()
    _install_handlers(level or log_level(), log_dir)
    _install_structlog(environment)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(method: str, path: str) -> None:
    """Attach the current HTTP request to every log line until ``unbind_request``."""
    structlog.contextvars.bind_contextvars(http_method=method, http_path=path)


def unbind_request() -> None:
    structlog.contextvars.unbind_contextvars("http_method", "http_path")
