"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)` with `event key=value`
messages; this only decides level and format once at startup.
"""

from __future__ import annotations

import logging

from . import settings

_LOCAL_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_PROD_FORMAT = "time=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"


def setup_logging() -> None:
    env = settings.app_env()
    default_level = "INFO" if env == "prod" else "DEBUG"
    level_name = settings.log_level() or default_level
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=_PROD_FORMAT if env == "prod" else _LOCAL_FORMAT,
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
