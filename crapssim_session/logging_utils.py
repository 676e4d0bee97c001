from __future__ import annotations

import logging
import sys
from typing import Optional


_LEVELS_BY_VERBOSE = {
    0: logging.WARNING,  # default
    1: logging.INFO,
    2: logging.DEBUG,
}


def setup_logging(verbose_count: int = 0, logger_name: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the CLI from its -v count and return the configured logger.

    The package logs under:
      CSS.Engine        one DEBUG line per placed and resolved bet, plus one per roll
      CSS.Session       INFO when a session ends
      CSS.Batch         INFO batch start/finish, ERROR for failed shards
      crapssim-session  CLI messages (journal and batch output paths, progress)

    Warnings only by default; -v shows session, batch and CLI INFO lines.
    The per-bet engine trace is switched on only at -vv. Repeated calls
    reuse the stderr handler already attached.
    """
    level = _LEVELS_BY_VERBOSE.get(verbose_count, logging.DEBUG)
    logger = logging.getLogger(logger_name or "")
    logger.setLevel(level)

    if not any(getattr(h, "_crapssim_session_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler._crapssim_session_handler = True  # type: ignore[attr-defined]
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    # The per-roll engine trace is only worth it at -vv
    logging.getLogger("CSS.Engine").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logger
