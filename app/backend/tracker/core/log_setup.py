"""Logging setup shared by the API and scripts."""

from __future__ import annotations

import logging

from tracker.core.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging once per process."""

    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("tracker").setLevel(level)
