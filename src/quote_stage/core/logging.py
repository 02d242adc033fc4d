"""Logging setup for the application process."""

from __future__ import annotations

import logging
import sys

from quote_stage.core.settings import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_HANDLER_NAME = "quote_stage"


def configure_logging(level: str | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Calling this more than once replaces the level but never stacks handlers.

    Args:
        level: Log level name; defaults to ``settings.log_level``.
    """
    root = logging.getLogger()
    resolved = (level or settings.log_level).upper()
    root.setLevel(resolved)

    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)

    # SQL echo is controlled by SQL_DEBUG, not by the application level.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_debug else logging.WARNING
    )
