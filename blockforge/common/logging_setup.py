"""Process-wide logging configuration."""
from __future__ import annotations

import logging

from blockforge.config.runtime_config import get_log_level

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Apply the configured level to the blockforge logger tree (idempotent)."""
    global _CONFIGURED
    target = (level or get_log_level()).upper()
    root = logging.getLogger("blockforge")
    root.setLevel(getattr(logging, target, logging.INFO))
    if not _CONFIGURED and not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    _CONFIGURED = True
