"""Shared logging helpers for partnerlink."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

_NOISY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    quiet: Sequence[str] = _NOISY_LOGGERS,
) -> None:
    """Initialise the root logger with a terse CLI format.

    Loggers listed in ``quiet`` are capped at WARNING unless ``level`` is DEBUG,
    so a reconciliation run prints its own summary rather than one line per
    HTTP request or migration step. Pass ``force=True`` to reconfigure in tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
