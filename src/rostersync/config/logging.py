"""Root logger setup for the rostersync CLI."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "ROSTERSYNC_LOG_LEVEL"

# Per-request chatter from the HTTP stack stays hidden unless we are debugging.
_NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``level`` defaults to ``ROSTERSYNC_LOG_LEVEL`` (a level name such as ``DEBUG``),
    then INFO. An unknown name is reported and treated as INFO.
    """

    unknown_name: str | None = None
    if level is None:
        name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
        resolved = logging.getLevelNamesMapping().get(name) if name else logging.INFO
        if resolved is None:
            unknown_name = name
            resolved = logging.INFO
        level = resolved

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if level > logging.DEBUG:
        for noisy in _NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    if unknown_name is not None:
        logging.getLogger(__name__).warning(
            "Ignoring unknown %s=%r, using INFO", LOG_LEVEL_ENV, unknown_name
        )
