"""Logging setup shared by the API process and CLI scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Install a single stream handler on the ``leavedesk`` logger tree."""
    root = logging.getLogger("leavedesk")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_leavedesk", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._leavedesk = True  # type: ignore[attr-defined]
        root.addHandler(handler)
