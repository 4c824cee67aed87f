"""Centralized logging configuration.

Usage:
    from salesdesk.logging_config import setup_logging
    setup_logging()   # once at startup
"""

import logging
import sys

from .config import get_settings

_SQL_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(str(raw).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """Configure root and SQLAlchemy log levels from application settings."""

    settings = get_settings()
    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # scripts and tests run without a host that installs a handler
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        root.addHandler(handler)

    sql_level = _parse_level(settings.log_level_sql)
    for name in _SQL_LOGGERS:
        logging.getLogger(name).setLevel(sql_level)
